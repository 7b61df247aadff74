import pytest

import app as app_module
from app import app
from session import GameSession


@pytest.fixture
def client(monkeypatch):
    """Create a test client backed by a fresh session without thinking delays."""
    monkeypatch.setattr(app_module, 'session', GameSession(delay_scale=0))
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def started(client):
    response = client.post('/api/game/new', json={'difficulty': 'normal', 'seed': 42})
    assert response.status_code == 200
    return client


def test_state_before_new_game(client):
    assert client.get('/api/game/state').status_code == 404
    assert client.get('/api/game/log').status_code == 404
    assert client.post('/api/game/select', json={'territory_id': 0}).status_code == 404


def test_new_game(client):
    response = client.post('/api/game/new', json={'difficulty': 'hard', 'seed': 42})
    assert response.status_code == 200
    state = response.json['state']
    assert state['turn'] == 1
    assert state['current_player'] == 'player'
    assert state['phase'] == 'reinforce'
    assert state['difficulty'] == 'hard'
    assert state['reinforcements_available'] == 3
    assert len(state['territories']) == 37


def test_new_game_without_body_uses_defaults(client):
    response = client.post('/api/game/new')
    assert response.status_code == 200
    assert response.json['state']['difficulty'] == 'normal'


@pytest.mark.parametrize("body", [
    {'difficulty': 'impossible'},
    {'seed': 'abc'},
    {'seed': True},
])
def test_new_game_bad_request(client, body):
    response = client.post('/api/game/new', json=body)
    assert response.status_code == 400
    assert 'error' in response.json


def test_new_game_refused_during_opponent_turn(started):
    app_module.session._opponent_turn_in_progress = True
    assert started.post('/api/game/new', json={}).status_code == 409


def test_get_state(started):
    response = started.get('/api/game/state')
    assert response.status_code == 200
    state = response.json['state']
    player = [t for t in state['territories'] if t['owner'] == 'player']
    assert [(t['id'], t['q'], t['r'], t['units']) for t in player] == [(0, -3, 0, 5)]


def test_select_reinforces(started):
    response = started.post('/api/game/select', json={'territory_id': 0})
    assert response.status_code == 200
    state = response.json['state']
    assert state['territories'][0]['units'] == 6
    assert state['reinforcements_available'] == 2


@pytest.mark.parametrize("body", [{}, {'territory_id': 'zero'}, {'territory_id': 1.5}])
def test_select_bad_request(started, body):
    assert started.post('/api/game/select', json=body).status_code == 400


def test_select_invalid_json(started):
    response = started.post('/api/game/select', data='not json', content_type='application/json')
    assert response.status_code == 400


def test_select_unknown_territory_is_logged(started):
    response = started.post('/api/game/select', json={'territory_id': 500})
    assert response.status_code == 200
    assert response.json['state']['logs'][-1] == 'Unknown territory 500'


def test_move_rejected_is_reported(started):
    response = started.post('/api/game/move', json={'source': 0, 'target': 1, 'count': 2})
    assert response.status_code == 200
    assert response.json['moved'] is False
    assert response.json['state']['logs'][-1].startswith('Move rejected')


def test_move_bad_request(started):
    assert started.post('/api/game/move', json={'source': 0}).status_code == 400


def test_end_turn_runs_opponent(started):
    for _ in range(3):
        started.post('/api/game/select', json={'territory_id': 0})

    response = started.post('/api/game/end-turn')
    assert response.status_code == 200
    assert response.json['opponent_played'] is True
    state = response.json['state']
    assert state['current_player'] == 'player'
    assert state['turn'] == 2
    assert state['statistics']['opponent']['total_units_deployed'] == 3


def test_input_refused_during_opponent_turn(started):
    app_module.session._opponent_turn_in_progress = True
    assert started.post('/api/game/select', json={'territory_id': 0}).status_code == 409
    assert started.post('/api/game/move', json={'source': 0, 'target': 1}).status_code == 409
    assert started.post('/api/game/end-turn').status_code == 409


def test_log(started):
    started.post('/api/game/select', json={'territory_id': 0})
    response = started.get('/api/game/log')
    assert response.status_code == 200
    data = response.json
    assert data['turn'] == 1
    assert data['status'] == 'ongoing'
    assert data['log'][0].startswith('The game has begun')
    assert data['move_history'] == []


def test_api_session_does_not_sleep():
    assert app_module.session.delay_scale == 0
