import logging
import threading
from functools import wraps

from chessrelay.models import BLACK, DEFAULT_CLOCK_SECONDS, START_FEN, WHITE, opposite
from chessrelay.services import clock, membership
from chessrelay.services.errors import RoomNotFound, StartRejected
from chessrelay.services.reconciler import DisconnectReconciler, resync_payload

logger = logging.getLogger(__name__)

DRAW = 'Draw'


def _serialized(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _label(side):
    return side.capitalize()


class GameSessionController:
    """Drives rooms through lobby -> active -> ended and relays the results.

    Every public method is one inbound event. Methods run one at a time,
    broadcasts included, so handlers never interleave on the same room.
    Rejections meant for the sender raise a SessionError; privilege failures
    and stale moves return None without touching state.
    """

    def __init__(self, store, channel, clock_seconds=DEFAULT_CLOCK_SECONDS, now=clock.epoch_ms):
        self.store = store
        self.channel = channel
        self.clock_seconds = float(clock_seconds)
        self.now = now
        self.reconciler = DisconnectReconciler(store, channel)
        self._lock = threading.RLock()

    # ---- helpers ----

    def _require_room(self, code):
        room = self.store.get(code)
        if room is None:
            raise RoomNotFound()
        return room

    def _broadcast(self, room):
        self.channel.emit('update_lobby', room.to_dict(), to=room.code)

    def _finish(self, room, reason, winner, message, **extra):
        payload = {'reason': reason, 'winner': winner, 'message': message}
        payload.update({k: v for k, v in extra.items() if v is not None})
        room.started = False
        room.draw_offer_side = None
        room.last_result = payload
        self.channel.emit('game_over', payload, to=room.code)
        self._broadcast(room)
        logger.info(f"[game-over] room={room.code} reason={reason} winner={winner}")
        return payload

    def _active_side(self, room, sid):
        """Side held by `sid` in a running match, or None."""
        if not room.started:
            return None
        return membership.slot_of(room, sid)

    # ---- lobby ----

    @_serialized
    def create_room(self, sid, name):
        room = self.store.create(sid, name)
        self.channel.enter(sid, room.code)
        self.channel.emit('room_created', {'roomCode': room.code, 'isAdmin': True, 'playerId': sid}, to=sid)
        self._broadcast(room)
        logger.info(f"[room-created] room={room.code} admin={sid} name={name}")
        return room

    @_serialized
    def join_room(self, sid, code, name):
        room = self._require_room(code)
        is_admin = membership.join(room, sid, name)
        self.channel.enter(sid, room.code)
        self.channel.emit('joined_room', {'roomCode': room.code, 'isAdmin': is_admin, 'playerId': sid}, to=sid)
        self._broadcast(room)
        if room.started:
            self.channel.emit('reconnect_game', resync_payload(room, self.now()), to=sid)
        logger.info(f"[room-joined] room={room.code} player={sid} name={name} active={room.started}")
        return room

    @_serialized
    def assign_slot(self, sid, code, target, slot):
        room = self.store.get(code)
        if room is None or not membership.assign_slot(room, sid, target, slot):
            return None
        # A pending offer belongs to whoever held the seat when it was made
        room.draw_offer_side = None
        self._broadcast(room)
        return room

    @_serialized
    def remove_from_slot(self, sid, code, slot):
        room = self.store.get(code)
        if room is None or not membership.unassign_slot(room, sid, slot):
            return None
        room.draw_offer_side = None
        self._broadcast(room)
        return room

    @_serialized
    def set_shine_color(self, sid, code, target, color):
        room = self.store.get(code)
        if room is None or not membership.set_shine(room, sid, target, color):
            return None
        self._broadcast(room)
        return room

    @_serialized
    def kick_player(self, sid, code, target):
        room = self.store.get(code)
        if room is None or not membership.kick(room, sid, target):
            return None
        room.draw_offer_side = None
        self.channel.emit('kicked', {'roomCode': room.code}, to=target)
        self.channel.leave(target, room.code)
        self._broadcast(room)
        logger.info(f"[player-kicked] room={room.code} player={target}")
        return room

    @_serialized
    def send_chat(self, sid, code, message):
        room = self.store.get(code)
        participant = membership.find_participant(room, sid) if room else None
        if participant is None:
            return None
        payload = {
            'name': participant.name,
            'message': message,
            'isAdmin': membership.is_admin(room, sid),
        }
        self.channel.emit('receive_chat', payload, to=room.code)
        return payload

    # ---- match ----

    @_serialized
    def start_game(self, sid, code):
        room = self.store.get(code)
        if room is None or not membership.is_admin(room, sid):
            return None
        if any(holder is None for holder in room.slots.values()):
            raise StartRejected()
        clock.reset(room, self.clock_seconds, self.now())
        room.started = True
        room.fen = START_FEN
        room.draw_offer_side = None
        room.last_result = None
        self.channel.emit('game_started', {
            'whitePlayerId': room.slot_id(WHITE),
            'blackPlayerId': room.slot_id(BLACK),
            'whiteTime': room.white_time,
            'blackTime': room.black_time,
        }, to=room.code)
        self._broadcast(room)
        logger.info(f"[game-started] room={room.code} white={room.slot_id(WHITE)} black={room.slot_id(BLACK)}")
        return room

    @_serialized
    def make_move(self, sid, code, move, fen):
        room = self.store.get(code)
        if room is None:
            return None
        side = self._active_side(room, sid)
        # Out of turn or from a non player: dropped, duplicates and late sends are expected
        if side is None or side != room.turn:
            return None

        now = self.now()
        clock.debit(room, now)
        expired = clock.expired_side(room)
        if expired is not None:
            clock.clamp(room)
            winner = _label(opposite(expired))
            return self._finish(room, 'Timeout', winner, f"Time's up! {winner} Wins!")

        room.fen = fen
        clock.flip_turn(room)
        clock.stamp(room, now)
        room.draw_offer_side = None
        payload = {
            'move': move,
            'fen': fen,
            'whiteTime': room.white_time,
            'blackTime': room.black_time,
            'turn': room.turn[0],
        }
        self.channel.emit('move_made', payload, to=room.code)
        return payload

    @_serialized
    def resign(self, sid, code):
        room = self.store.get(code)
        if room is None:
            return None
        side = self._active_side(room, sid)
        # Both seats must be taken for there to be someone to award the win to
        if side is None or room.slots[opposite(side)] is None:
            return None
        name = room.slots[side].name
        winner = _label(opposite(side))
        return self._finish(room, 'Resignation', winner, f"{name} resigned. {winner} wins!")

    @_serialized
    def claim_game_over(self, sid, code, reason, winner, fen=None, last_move=None):
        room = self.store.get(code)
        if room is None or self._active_side(room, sid) is None:
            return None
        if fen:
            room.fen = fen
        if winner == DRAW:
            message = f"Game ended in a Draw ({reason})"
        else:
            message = f"Checkmate! {winner} Wins!"
        return self._finish(room, reason, winner, message, fen=fen, lastMove=last_move)

    @_serialized
    def offer_draw(self, sid, code):
        room = self.store.get(code)
        if room is None:
            return None
        side = self._active_side(room, sid)
        opponent = room.slot_id(opposite(side)) if side else None
        if opponent is None:
            return None
        room.draw_offer_side = side
        self.channel.emit('draw_offered', {'roomCode': room.code, 'by': sid}, to=opponent)
        return opponent

    @_serialized
    def accept_draw(self, sid, code):
        room = self.store.get(code)
        side = self._active_side(room, sid) if room else None
        if side is None or room.draw_offer_side != opposite(side):
            return None
        return self._finish(room, 'Agreement', DRAW, 'Game ended in a Draw (Mutual Agreement)')

    @_serialized
    def reject_draw(self, sid, code):
        room = self.store.get(code)
        side = self._active_side(room, sid) if room else None
        # Only the side an offer was made to can turn it down
        if side is None or room.draw_offer_side != opposite(side):
            return None
        room.draw_offer_side = None
        self.channel.emit('draw_rejected', {'roomCode': room.code, 'by': sid}, to=room.code, skip_sid=sid)
        return room

    # ---- connection loss ----

    @_serialized
    def disconnect(self, sid):
        return self.reconciler.disconnect(sid)
