import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from opponent import DIFFICULTY_PRESETS
from session import GameSession

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)  # Enable CORS for the browser renderer
# Single local game session; the opponent turn runs inside the end-turn
# request, so thinking delays are left to the renderer
session = GameSession(delay_scale=0)


def _game_not_found():
    return jsonify({'error': 'Game not found'}), 404


def _int_field(data: dict, key: str, required: bool = True) -> Optional[int]:
    """Read an integer field from a JSON body, raising ValueError if invalid."""
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f'{key} is required')
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f'{key} must be an integer')
    return value


def _state_response(**extra: Any):
    state = session.get_state()
    return jsonify({**extra, 'state': state})


@app.route('/api/game/new', methods=['POST'])
def new_game():
    """Create a new game with the requested difficulty and optional seed."""
    data = request.get_json(silent=True) or {}

    difficulty = data.get('difficulty')
    if difficulty is not None and difficulty not in DIFFICULTY_PRESETS:
        return jsonify({'error': f'Unknown difficulty: {difficulty}'}), 400

    try:
        seed = _int_field(data, 'seed', required=False)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    if session.opponent_turn_in_progress:
        return jsonify({'error': 'Opponent turn in progress'}), 409

    session.create_game(difficulty, seed=seed)
    return _state_response()


@app.route('/api/game/state', methods=['GET'])
def get_game_state():
    """Retrieve a snapshot of the current game."""
    if session.game_state is None:
        return _game_not_found()
    return _state_response()


@app.route('/api/game/select', methods=['POST'])
def select_territory():
    """Click on a territory: reinforce, select, attack or move depending on phase."""
    if session.game_state is None:
        return _game_not_found()

    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400

    try:
        territory_id = _int_field(data, 'territory_id')
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    if not session.select_territory(territory_id):
        return jsonify({'error': 'Not your turn'}), 409
    return _state_response()


@app.route('/api/game/move', methods=['POST'])
def move_troops():
    """Move troops between two adjacent territories of the player."""
    if session.game_state is None:
        return _game_not_found()

    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400

    try:
        source = _int_field(data, 'source')
        target = _int_field(data, 'target')
        count = _int_field(data, 'count', required=False)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    if session.game_state.current_player != 'player' or session.opponent_turn_in_progress:
        return jsonify({'error': 'Not your turn'}), 409

    moved = session.move(source, target, count)
    return _state_response(moved=moved)


@app.route('/api/game/end-turn', methods=['POST'])
def end_turn():
    """End the player's turn and let the opponent play its turn to completion."""
    if session.game_state is None:
        return _game_not_found()

    if not session.next_turn():
        return jsonify({'error': 'Not your turn'}), 409

    opponent_played = False
    if session.opponent_to_move:
        opponent_played = session.run_opponent_turn()
        logger.info("Opponent turn finished (turn %d)", session.game_state.turn)

    return _state_response(opponent_played=opponent_played)


@app.route('/api/game/log', methods=['GET'])
def get_game_log():
    """Retrieve the log feed and move history."""
    if session.game_state is None:
        return _game_not_found()

    state = session.get_state()
    return jsonify({
        'turn': state['turn'],
        'status': state['status'],
        'log': state['logs'],
        'move_history': state['move_history'],
    })


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    # Single-threaded: one writer at a time
    app.run(debug=True, threaded=False)
