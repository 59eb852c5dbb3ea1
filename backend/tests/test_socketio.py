def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    try:
        sio_client.get_received('/ws')
    except Exception:
        pass

    # Join a room and expect a joined ack
    sio_client.emit('join_quiz', {'quiz_id': 'ABCD'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' for pkt in received)


def test_join_requires_quiz_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_quiz', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_score_broadcasts_standings(sio_client, client):
    quiz = client.post('/api/quizzes', json={'name': 'Live Night'}).get_json()
    qid = quiz['id']
    round_ = client.post(f'/api/quizzes/{qid}/rounds', json={'name': 'Music'}).get_json()
    team = client.post(f'/api/quizzes/{qid}/teams', json={'name': 'Alpha'}).get_json()

    sio_client.emit('join_quiz', {'quiz_id': qid}, namespace='/ws')
    joined = sio_client.get_received('/ws')
    # Joining sends the current standings straight away
    assert any(pkt['name'] == 'standings_update' for pkt in joined)

    client.put(f"/api/quizzes/{qid}/rounds/{round_['id']}/scores/{team['id']}", json={'points': 4})
    events = sio_client.get_received('/ws')
    updates = [pkt['args'][0] for pkt in events if pkt['name'] == 'standings_update']
    assert updates
    assert updates[-1]['quiz_id'] == qid
    assert updates[-1]['standings'][0]['quiz_total'] == 4
    assert updates[-1]['standings'][0]['rank'] == 1


def test_leave_quiz_stops_updates(sio_client, client):
    qid = client.post('/api/quizzes', json={'name': 'Quiet Night'}).get_json()['id']
    sio_client.emit('join_quiz', {'quiz_id': qid}, namespace='/ws')
    sio_client.emit('leave_quiz', {'quiz_id': qid}, namespace='/ws')
    assert any(pkt['name'] == 'left' for pkt in sio_client.get_received('/ws'))

    client.post(f'/api/quizzes/{qid}/rounds', json={'name': 'Music'})
    events = sio_client.get_received('/ws')
    assert not any(pkt['name'] == 'standings_update' for pkt in events)
