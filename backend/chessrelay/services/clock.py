"""Server-side chess clock bookkeeping.

Times on a room are remaining seconds per side; event stamps are epoch
milliseconds. Everything here is a pure function of the room and `now_ms`.
"""

import time
from typing import Optional, Tuple

from chessrelay.models import BLACK, WHITE, Room, opposite


def epoch_ms() -> int:
    return int(time.time() * 1000)


def elapsed_seconds(last_event_ms, now_ms) -> float:
    if not last_event_ms:
        return 0.0
    return max(0.0, (now_ms - last_event_ms) / 1000.0)


def reset(room: Room, allowance: float, now_ms) -> None:
    room.white_time = float(allowance)
    room.black_time = float(allowance)
    room.turn = WHITE
    room.last_event_time = now_ms


def debit(room: Room, now_ms) -> float:
    """Charge the side to move for the time since the last event."""
    elapsed = elapsed_seconds(room.last_event_time, now_ms)
    room.set_time(room.turn, room.time_for(room.turn) - elapsed)
    return elapsed


def flip_turn(room: Room) -> None:
    room.turn = opposite(room.turn)


def stamp(room: Room, now_ms) -> None:
    room.last_event_time = now_ms


def expired_side(room: Room) -> Optional[str]:
    # White is checked first: if both flags fell, white is the one reported
    if room.white_time <= 0:
        return WHITE
    if room.black_time <= 0:
        return BLACK
    return None


def clamp(room: Room) -> None:
    room.white_time = max(0.0, room.white_time)
    room.black_time = max(0.0, room.black_time)


def projected_times(room: Room, now_ms) -> Tuple[float, float]:
    """Remaining times as they would read at `now_ms`, without storing them."""
    white, black = room.white_time, room.black_time
    if room.started and room.last_event_time > 0:
        elapsed = elapsed_seconds(room.last_event_time, now_ms)
        if room.turn == WHITE:
            white = max(0.0, white - elapsed)
        else:
            black = max(0.0, black - elapsed)
    return white, black
