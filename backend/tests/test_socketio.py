def _events(sio_client, name):
    return [e for e in sio_client.get_received('/ws') if e['name'] == name]


def test_socket_connect_and_join(client, sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('join_session', {'game_code': code.lower()}, namespace='/ws')
    joined = _events(sio_client, 'joined')
    assert joined
    assert joined[0]['args'][0]['room'] == f'session:{code}'
    assert joined[0]['args'][0]['state']['phase'] == 'MENU'


def test_join_unknown_session_errors(sio_client):
    sio_client.emit('join_session', {'game_code': 'NOPE1'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors and errors[0]['args'][0]['message'] == 'Session not found'


def test_room_receives_announcements_and_state(client, sio_client, registry):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('join_session', {'game_code': code}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    state = client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'NORMAL'}).get_json()
    received = sio_client.get_received('/ws')
    announcements = [e['args'][0] for e in received if e['name'] == 'announce']
    updates = [e['args'][0] for e in received if e['name'] == 'state_update']
    assert announcements == [{'game_code': code, 'text': state['command']['text'], 'interrupt': True}]
    assert updates and updates[-1]['phase'] == 'ANNOUNCING'

    registry.scheduler.fire_next()
    updates = _events(sio_client, 'state_update')
    assert updates[-1]['args'][0]['phase'] == 'AWAITING_INPUT'


def test_player_input_over_socket(client, sio_client, registry):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('join_session', {'game_code': code, 'is_player': True}, namespace='/ws')
    state = client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'EASY'}).get_json()
    registry.scheduler.fire_next()
    sio_client.get_received('/ws')  # flush

    command = state['command']
    color = command['color']
    if command['is_negated']:
        color = 'WHITE' if color == 'RED' else 'RED'
    sio_client.emit('player_input', {'game_code': code, 'color': color, 'direction': command['direction']},
                    namespace='/ws')
    results = _events(sio_client, 'input_result')
    assert results[0]['args'][0]['accepted'] is True
    assert results[0]['args'][0]['state']['phase'] == 'TRANSITIONING'

    sio_client.emit('player_input', {'game_code': code, 'color': 'GREEN', 'direction': 'UP'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors and 'GREEN' in errors[0]['args'][0]['message']


def test_player_disconnect_abandons_session(flask_app, client, registry):
    from commander import socketio as _sio

    code = client.post('/api/games/create').get_json()['game_code']
    player = _sio.test_client(flask_app, namespace='/ws')
    player.emit('join_session', {'game_code': code, 'is_player': True}, namespace='/ws')
    client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'NORMAL'})
    assert registry.get(code).phase.value == 'ANNOUNCING'

    table = registry.get(code)
    player.disconnect(namespace='/ws')
    assert table.phase.value == 'MENU'
    assert registry.scheduler.pending() == []
    assert client.get('/leaderboard').get_json() == []
    assert client.get(f'/api/games/{code}/state').status_code == 404


def test_player_disconnect_closes_every_table(flask_app, client, registry):
    from commander import socketio as _sio

    players = []
    for _ in range(5):
        code = client.post('/api/games/create').get_json()['game_code']
        player = _sio.test_client(flask_app, namespace='/ws')
        player.emit('join_session', {'game_code': code, 'is_player': True}, namespace='/ws')
        client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'EASY'})
        players.append(player)
    assert len(registry) == 5

    for player in players:
        player.disconnect(namespace='/ws')
    assert len(registry) == 0
    assert registry.scheduler.pending() == []


def test_spectator_disconnect_keeps_table(client, sio_client, registry):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('join_session', {'game_code': code}, namespace='/ws')
    client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'EASY'})

    sio_client.disconnect(namespace='/ws')
    assert len(registry) == 1
    assert registry.get(code).phase.value == 'ANNOUNCING'


def test_quit_over_socket(client, sio_client):
    code = client.post('/api/games/create').get_json()['game_code']
    client.post(f'/api/games/{code}/start', json={'name': 'Nemo', 'difficulty': 'HARD'})
    sio_client.emit('quit_session', {'game_code': code}, namespace='/ws')
    quits = _events(sio_client, 'quit')
    assert quits[0]['args'][0]['state']['phase'] == 'MENU'


def test_ping(sio_client):
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pongs = _events(sio_client, 'pong')
    assert pongs[0]['args'][0] == {'n': 1}
