from flask_socketio import emit
from flask import current_app, request
from chessrelay import socketio
from chessrelay.services.errors import SessionError


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _controller():
    return current_app.extensions['game_sessions']


def _room_code(data):
    """Room code from either a bare code or a {'roomCode': ...} payload."""
    if isinstance(data, dict):
        data = data.get('roomCode')
    return str(data) if data is not None else None


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _reply_error(exc: SessionError) -> None:
    emit('error_message', exc.message)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] player={_get_sid()}")
    emit('connected', {'playerId': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] player={sid} reason={reason}")
    _controller().disconnect(sid)


def handle_create_room(player_name=None):
    if isinstance(player_name, dict):
        player_name = player_name.get('playerName')
    _controller().create_room(_get_sid(), player_name or 'Player')


def handle_join_room(data=None):
    data = _payload(data)
    try:
        _controller().join_room(_get_sid(), _room_code(data), data.get('playerName') or 'Player')
    except SessionError as exc:
        _reply_error(exc)


def handle_assign_slot(data=None):
    data = _payload(data)
    _controller().assign_slot(_get_sid(), _room_code(data), data.get('playerId'), data.get('slot'))


def handle_remove_from_slot(data=None):
    data = _payload(data)
    _controller().remove_from_slot(_get_sid(), _room_code(data), data.get('slot'))


def handle_set_shine_color(data=None):
    data = _payload(data)
    _controller().set_shine_color(_get_sid(), _room_code(data), data.get('playerId'), data.get('color'))


def handle_kick_player(data=None):
    data = _payload(data)
    _controller().kick_player(_get_sid(), _room_code(data), data.get('playerId'))


def handle_start_game(data=None):
    try:
        _controller().start_game(_get_sid(), _room_code(data))
    except SessionError as exc:
        _reply_error(exc)


def handle_make_move(data=None):
    data = _payload(data)
    _controller().make_move(_get_sid(), _room_code(data), data.get('move'), data.get('fen'))


def handle_resign(data=None):
    _controller().resign(_get_sid(), _room_code(data))


def handle_claim_game_over(data=None):
    data = _payload(data)
    _controller().claim_game_over(
        _get_sid(),
        _room_code(data),
        data.get('reason'),
        data.get('winner'),
        fen=data.get('fen'),
        last_move=data.get('lastMove'),
    )


def handle_offer_draw(data=None):
    _controller().offer_draw(_get_sid(), _room_code(data))


def handle_accept_draw(data=None):
    _controller().accept_draw(_get_sid(), _room_code(data))


def handle_reject_draw(data=None):
    _controller().reject_draw(_get_sid(), _room_code(data))


def handle_send_chat(data=None):
    data = _payload(data)
    _controller().send_chat(_get_sid(), _room_code(data), data.get('message'))


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'create_room': handle_create_room,
    'join_room': handle_join_room,
    'assign_slot': handle_assign_slot,
    'remove_from_slot': handle_remove_from_slot,
    'set_shine_color': handle_set_shine_color,
    'kick_player': handle_kick_player,
    'start_game': handle_start_game,
    'make_move': handle_make_move,
    'resign': handle_resign,
    'claim_game_over': handle_claim_game_over,
    'offer_draw': handle_offer_draw,
    'accept_draw': handle_accept_draw,
    'reject_draw': handle_reject_draw,
    'send_chat': handle_send_chat,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the shared socketio instance."""
    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace=namespace)
