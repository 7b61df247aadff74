import json

from models import NEUTRAL, ONGOING, OPPONENT, PLAYER, REINFORCE, MoveRecord, Territory
from state import (
    DEFAULT_CONFIG,
    GameState,
    add_to_history,
    get_game_summary,
    initialize_game,
    load_config,
    log_event,
)


def test_initialize_game_basic():
    """Test that initialize_game sets up the game state correctly."""
    game_state = initialize_game('hard', seed=42)

    assert isinstance(game_state, GameState), "GameState object not created"
    assert game_state.turn == 1, "Initial turn should be 1"
    assert game_state.current_player == PLAYER, "Player moves first"
    assert game_state.phase == REINFORCE, "Initial phase should be 'reinforce'"
    assert game_state.status == ONGOING
    assert game_state.selected_id is None
    assert game_state.difficulty == 'hard'
    assert game_state.reinforcements_available == 3, "One territory still earns the minimum of 3"
    assert len(game_state.territories) == 37, "Radius 3 map has 37 hexes"
    assert game_state.logs[0].startswith("The game has begun")


def test_initialize_game_owners():
    game_state = initialize_game(seed=42)
    assert len(game_state.territories_of(PLAYER)) == 1
    assert len(game_state.territories_of(OPPONENT)) == 1
    assert len(game_state.territories_of(NEUTRAL)) == 35
    assert game_state.strength_of(PLAYER) == 5


def test_initialize_game_seed_reproducible():
    first = initialize_game(seed=9)
    second = initialize_game(seed=9)
    assert [t.units for t in first.territories] == [t.units for t in second.territories]


def test_initialize_game_config_override():
    game_state = initialize_game(config={'map_radius': 1, 'log_limit': 5, 'min_reinforcements': 2})
    assert len(game_state.territories) == 7
    assert game_state.logs.maxlen == 5
    assert game_state.reinforcements_available == 2
    assert game_state.config['reinforcement_rate'] == DEFAULT_CONFIG['reinforcement_rate']


def test_load_config_missing_file(tmp_path):
    assert load_config(str(tmp_path / 'missing.json')) == DEFAULT_CONFIG


def test_load_config_malformed_file(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{not json')
    assert load_config(str(path)) == DEFAULT_CONFIG


def test_load_config_merges_overrides(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'map_radius': 4}))
    config = load_config(str(path))
    assert config['map_radius'] == 4
    assert config['min_reinforcements'] == DEFAULT_CONFIG['min_reinforcements']


def test_log_is_bounded(game):
    for i in range(60):
        log_event(game, f"event {i}")
    assert len(game.logs) == 50
    assert game.logs[0] == "event 10"
    assert game.logs[-1] == "event 59"


def test_history_is_bounded(game):
    for i in range(55):
        add_to_history(game, MoveRecord(type='move', player=PLAYER, source=0, target=1, turn=i, units=1))
    assert len(game.move_history) == 50
    assert game.move_history[0].turn == 5


def test_get_territory(game):
    assert game.get_territory(0) is game.territories[0]
    assert game.get_territory(36).id == 36
    assert game.get_territory(37) is None
    assert game.get_territory(-1) is None
    assert game.get_territory('3') is None
    assert game.get_territory(None) is None
    assert game.get_territory(True) is None


def test_neighbors_of(game):
    center = next(t for t in game.territories if t.coords == (0, 0))
    assert sorted(n.id for n in game.neighbors_of(center)) == sorted(center.neighbors)


def test_neighbors_of_keeps_stored_order(front_state):
    source = front_state.territories[0]
    neighbors = front_state.neighbors_of(source)
    assert [n.id for n in neighbors] == list(source.neighbors)
    assert all(n is front_state.territories[n.id] for n in neighbors)


def test_neighbors_of_with_unordered_ids():
    first = Territory(id=7, q=0, r=0, owner=PLAYER, units=2, neighbors=(3,))
    second = Territory(id=3, q=1, r=0, owner=OPPONENT, units=2, neighbors=(7,))
    game_state = GameState(territories=[first, second])
    assert game_state.neighbors_of(first) == [second]
    assert game_state.neighbors_of(second) == [first]


def test_summary_is_a_detached_snapshot(game):
    summary = get_game_summary(game)
    assert summary['turn'] == 1
    assert summary['current_player'] == PLAYER
    assert len(summary['territories']) == 37
    assert summary['statistics']['game']['end_time'] is None

    summary['territories'][0]['units'] = 99
    summary['territories'][0]['neighbors'].append(12345)
    summary['logs'].append('tampered')

    assert game.territories[0].units == 5
    assert 12345 not in game.territories[0].neighbors
    assert 'tampered' not in game.logs


def test_summary_includes_history_and_statistics(game):
    add_to_history(game, MoveRecord(type='conquest', player=PLAYER, source=0, target=1, turn=1,
                                    defender=NEUTRAL))
    summary = get_game_summary(game)
    assert summary['move_history'][0]['type'] == 'conquest'
    assert summary['move_history'][0]['defender'] == NEUTRAL
    assert set(summary['statistics']['player']) == {
        'attacks', 'successful_attacks', 'territories_conquered',
        'territories_lost', 'largest_army', 'total_units_deployed',
    }
