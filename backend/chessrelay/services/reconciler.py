import logging

from chessrelay.models import BLACK, WHITE
from chessrelay.services import clock, membership

logger = logging.getLogger(__name__)


def resync_payload(room, now_ms):
    """Game view for a client (re)joining a room whose match is running."""
    white_time, black_time = clock.projected_times(room, now_ms)
    return {
        'whitePlayerId': room.slot_id(WHITE),
        'blackPlayerId': room.slot_id(BLACK),
        'fen': room.fen,
        'whiteTime': white_time,
        'blackTime': black_time,
        'turn': room.turn[0],
    }


class DisconnectReconciler:
    """Cleans up every room a lost connection belonged to.

    Losing the admin closes the room outright. Losing anyone else prunes
    them from the roster and their slot; a running match is left running
    with the slot vacated, there is no automatic forfeit.
    """

    def __init__(self, store, channel):
        self.store = store
        self.channel = channel

    def disconnect(self, identity):
        closed, pruned = [], []
        for room in self.store.rooms():
            if membership.is_admin(room, identity):
                self.channel.emit('room_closed', {'roomCode': room.code}, to=room.code)
                self.channel.close(room.code)
                self.store.delete(room.code)
                logger.info(f"[room-closed] room={room.code} reason=admin_left")
                closed.append(room.code)
                continue

            side = membership.slot_of(room, identity)
            if not membership.remove_participant(room, identity):
                continue
            if side is not None:
                room.draw_offer_side = None
            if side is not None and room.started:
                logger.warning(f"[slot-vacated] room={room.code} side={side} player={identity} match continues")

            if not room.participants:
                self.store.delete(room.code)
                logger.info(f"[room-deleted] room={room.code} reason=empty")
            else:
                self.channel.emit('update_lobby', room.to_dict(), to=room.code)
            pruned.append(room.code)
        return closed, pruned
