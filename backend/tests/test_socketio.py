def _drain(test_client):
    """Group received packets by event name, keeping first arguments."""
    received = {}
    for pkt in test_client.get_received():
        received.setdefault(pkt['name'], []).append(pkt['args'][0] if pkt['args'] else None)
    return received


def _player_id(test_client):
    return _drain(test_client)['connected'][0]['playerId']


def _seated_room(connect):
    admin, white, black = connect(), connect(), connect()
    ids = {name: _player_id(c) for name, c in (('admin', admin), ('white', white), ('black', black))}

    admin.emit('create_room', 'Ada')
    code = _drain(admin)['room_created'][0]['roomCode']
    white.emit('join_room', {'roomCode': code, 'playerName': 'Walt'})
    black.emit('join_room', {'roomCode': code, 'playerName': 'Bea'})
    admin.emit('assign_slot', {'roomCode': code, 'playerId': ids['white'], 'slot': 'white'})
    admin.emit('assign_slot', {'roomCode': code, 'playerId': ids['black'], 'slot': 'black'})
    for c in (admin, white, black):
        c.get_received()
    return code, ids, admin, white, black


def test_socket_connect_reports_identity(connect):
    test_client = connect()
    assert test_client.is_connected()
    assert _player_id(test_client)


def test_create_and_join_broadcast_lobby(connect):
    admin, guest = connect(), connect()
    admin_id, guest_id = _player_id(admin), _player_id(guest)

    admin.emit('create_room', 'Ada')
    created = _drain(admin)
    code = created['room_created'][0]['roomCode']
    assert created['room_created'][0]['isAdmin'] is True
    assert created['update_lobby'][0]['admin'] == admin_id

    guest.emit('join_room', {'roomCode': code, 'playerName': 'Gus'})
    joined = _drain(guest)
    assert joined['joined_room'][0] == {'roomCode': code, 'isAdmin': False, 'playerId': guest_id}
    lobby = _drain(admin)['update_lobby'][-1]
    assert [p['name'] for p in lobby['players']] == ['Ada', 'Gus']


def test_join_unknown_room_reports_error(connect):
    guest = connect()
    guest.get_received()
    guest.emit('join_room', {'roomCode': '000000', 'playerName': 'Gus'})
    assert _drain(guest)['error_message'] == ['Invalid Room Code']


def test_start_with_empty_slot_reports_error(connect):
    admin = connect()
    admin.get_received()
    admin.emit('create_room', 'Ada')
    code = _drain(admin)['room_created'][0]['roomCode']
    admin.emit('start_game', code)
    assert _drain(admin)['error_message'] == ['Both slots must be filled to start.']


def test_full_match_flow(connect, fake_clock):
    code, ids, admin, white, black = _seated_room(connect)

    admin.emit('start_game', code)
    started = _drain(white)['game_started'][0]
    assert started['whitePlayerId'] == ids['white']
    assert started['blackPlayerId'] == ids['black']
    black.get_received()
    admin.get_received()

    fake_clock.advance(10)
    white.emit('make_move', {'roomCode': code, 'move': 'e4', 'fen': 'fen-1'})
    for c in (admin, white, black):
        made = _drain(c)['move_made'][0]
        assert made['fen'] == 'fen-1'
        assert abs(made['whiteTime'] - 590.0) < 1e-6
        assert made['blackTime'] == 600.0

    # Repeat of the same move arrives late: white is no longer to move
    white.emit('make_move', {'roomCode': code, 'move': 'e4', 'fen': 'fen-1'})
    assert 'move_made' not in _drain(black)

    black.emit('resign', {'roomCode': code})
    over = _drain(admin)
    assert over['game_over'][0]['winner'] == 'White'
    assert over['update_lobby'][-1]['gameStarted'] is False


def test_draw_offer_reaches_only_opponent(connect):
    code, ids, admin, white, black = _seated_room(connect)
    admin.emit('start_game', code)
    for c in (admin, white, black):
        c.get_received()

    white.emit('offer_draw', code)
    assert 'draw_offered' in _drain(black)
    assert 'draw_offered' not in _drain(admin)
    assert 'draw_offered' not in _drain(white)

    black.emit('accept_draw', code)
    assert _drain(white)['game_over'][0]['reason'] == 'Agreement'


def test_rejoin_mid_game_receives_resync(connect, fake_clock):
    code, ids, admin, white, black = _seated_room(connect)
    admin.emit('start_game', code)
    fake_clock.advance(20)

    viewer = connect()
    viewer.get_received()
    viewer.emit('join_room', {'roomCode': code, 'playerName': 'Vic'})
    resync = _drain(viewer)['reconnect_game'][0]
    assert resync['turn'] == 'w'
    assert abs(resync['whiteTime'] - 580.0) < 1e-6
    assert resync['blackTime'] == 600.0


def test_chat_is_broadcast_with_sender(connect):
    code, ids, admin, white, black = _seated_room(connect)
    white.emit('send_chat', {'roomCode': code, 'message': 'good luck'})
    assert _drain(black)['receive_chat'] == [{'name': 'Walt', 'message': 'good luck', 'isAdmin': False}]


def test_kicked_player_is_told_and_stops_receiving(connect):
    code, ids, admin, white, black = _seated_room(connect)
    admin.emit('kick_player', {'roomCode': code, 'playerId': ids['black']})
    assert 'kicked' in _drain(black)
    lobby = _drain(white)['update_lobby'][-1]
    assert ids['black'] not in [p['id'] for p in lobby['players']]

    admin.emit('send_chat', {'roomCode': code, 'message': 'bye'})
    assert 'receive_chat' not in _drain(black)


def test_admin_disconnect_closes_room(flask_app, connect):
    code, ids, admin, white, black = _seated_room(connect)
    admin.disconnect()
    assert _drain(white)['room_closed'] == [{'roomCode': code}]
    assert flask_app.extensions['game_sessions'].store.get(code) is None


def test_player_disconnect_updates_lobby(flask_app, connect):
    code, ids, admin, white, black = _seated_room(connect)
    black.disconnect()
    lobby = _drain(admin)['update_lobby'][-1]
    assert lobby['slots']['black'] is None
    assert [p['id'] for p in lobby['players']] == [ids['admin'], ids['white']]
