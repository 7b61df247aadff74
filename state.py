"""
Game state management for the hex conquest game.
Implements the authoritative game state, configuration loading, the log feed
and read-only snapshots for presentation layers.

Turn structure: each side reinforces, then attacks or repositions, then ends
its turn. ``turn`` counts player turns, not half-turns.
"""

from __future__ import annotations
import json
import os
import random
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List, Optional

from map_gen import generate_map
from models import (
    NEUTRAL, ONGOING, OPPONENT, PLAYER, REINFORCE,
    GameStatistics, MoveRecord, Territory,
)

CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.json')

MIN_REINFORCEMENTS = 3
REINFORCEMENT_RATE = 3  # One unit per 3 territories
LOG_LIMIT = 50
HISTORY_LIMIT = 50

DEFAULT_CONFIG: Dict[str, Any] = {
    'map_radius': 3,
    'neutral_min_units': 2,
    'neutral_max_units': 4,
    'starting_units': 5,
    'reinforcement_rate': REINFORCEMENT_RATE,
    'min_reinforcements': MIN_REINFORCEMENTS,
    'log_limit': LOG_LIMIT,
    'history_limit': HISTORY_LIMIT,
    'default_difficulty': 'normal',
    'thinking_delay_scale': 1.0,
}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load game configuration, falling back to defaults for missing values.

    Args:
        path: Config file to read (defaults to config.json beside this module)

    Returns:
        Dictionary with every key of DEFAULT_CONFIG
    """
    config = dict(DEFAULT_CONFIG)
    try:
        with open(path or CONFIG_PATH, 'r') as f:
            config.update(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError):
        # Use defaults if config file is missing or invalid
        pass
    return config


@dataclass
class GameState:
    """
    Complete game state, the single source of truth for one session.

    Only the rules functions in orders, resolution and upkeep change
    territories, phase, current_player or status.
    """
    territories: List[Territory]
    turn: int = 1
    current_player: str = PLAYER  # 'player' or 'opponent'
    phase: str = REINFORCE  # 'reinforce' or 'attack'
    selected_id: Optional[int] = None
    reinforcements_available: int = 0
    status: str = ONGOING  # 'ongoing', 'won' or 'lost'
    difficulty: str = 'normal'
    logs: Deque[str] = field(default_factory=lambda: deque(maxlen=LOG_LIMIT))
    move_history: Deque[MoveRecord] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))
    statistics: GameStatistics = field(default_factory=lambda: GameStatistics(start_time=time.time()))
    config: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG))

    def get_territory(self, territory_id: Any) -> Optional[Territory]:
        """Get a territory by id, or None if the id does not resolve."""
        if isinstance(territory_id, bool) or not isinstance(territory_id, int):
            return None
        if 0 <= territory_id < len(self.territories) and self.territories[territory_id].id == territory_id:
            return self.territories[territory_id]
        for territory in self.territories:
            if territory.id == territory_id:
                return territory
        return None

    def territories_of(self, owner: str) -> List[Territory]:
        """All territories held by ``owner``."""
        return [t for t in self.territories if t.owner == owner]

    def neighbors_of(self, territory: Territory) -> List[Territory]:
        """Neighboring territories in stored neighbor order."""
        return [self.get_territory(n) for n in territory.neighbors]

    def strength_of(self, owner: str) -> int:
        """Total units held by ``owner``."""
        return sum(t.units for t in self.territories if t.owner == owner)

    @property
    def is_ongoing(self) -> bool:
        return self.status == ONGOING


def log_event(game_state: GameState, event: str) -> None:
    """
    Add an entry to the player-visible log feed.

    The feed is bounded; the oldest entry is dropped once the limit is reached.
    """
    game_state.logs.append(event)


def add_to_history(game_state: GameState, record: MoveRecord) -> None:
    """Append a move record to the bounded move history."""
    game_state.move_history.append(record)


def side_label(side: str) -> str:
    """Human-readable name of a side for log messages."""
    return {PLAYER: 'Player', OPPONENT: 'Opponent', NEUTRAL: 'Neutral'}.get(side, side)


def initialize_game(difficulty: Optional[str] = None, seed: Optional[int] = None,
                    config: Optional[Dict[str, Any]] = None) -> GameState:
    """
    Initialize a new game state with a generated map.

    The player starts on the westernmost hex, the opponent on the easternmost,
    each with 5 units; every other hex is neutral with 2-4 units.

    Args:
        difficulty: Opponent difficulty name recorded on the state
        seed: Random seed for the neutral garrisons (random if omitted)
        config: Configuration overrides (loaded from config.json if omitted)

    Returns:
        New GameState ready for the player's first reinforcement phase
    """
    # Imported here: upkeep imports this module
    from upkeep import calculate_reinforcements

    cfg = dict(load_config() if config is None else {**DEFAULT_CONFIG, **config})
    difficulty = difficulty or cfg['default_difficulty']

    territories = generate_map(
        cfg['map_radius'],
        rng=random.Random(seed),
        neutral_min_units=cfg['neutral_min_units'],
        neutral_max_units=cfg['neutral_max_units'],
        starting_units=cfg['starting_units'],
    )

    game_state = GameState(
        territories=territories,
        difficulty=difficulty,
        logs=deque(maxlen=cfg['log_limit']),
        move_history=deque(maxlen=cfg['history_limit']),
        config=cfg,
    )

    log_event(game_state, "The game has begun! Both sides take their positions.")
    calculate_reinforcements(game_state)

    return game_state


def get_game_summary(game_state: GameState) -> Dict[str, Any]:
    """
    Get a read-only snapshot of the game state for presentation layers.

    Every value is a fresh copy; mutating the result never touches the game.

    Args:
        game_state: Current game state

    Returns:
        Dictionary with game summary information
    """
    stats = game_state.statistics
    return {
        'turn': game_state.turn,
        'current_player': game_state.current_player,
        'phase': game_state.phase,
        'status': game_state.status,
        'difficulty': game_state.difficulty,
        'selected_id': game_state.selected_id,
        'reinforcements_available': game_state.reinforcements_available,
        'territories': [
            {
                'id': t.id,
                'q': t.q,
                'r': t.r,
                'owner': t.owner,
                'units': t.units,
                'neighbors': list(t.neighbors),
                'flash': t.flash,
            }
            for t in game_state.territories
        ],
        'logs': list(game_state.logs),
        'move_history': [asdict(record) for record in game_state.move_history],
        'statistics': {
            'player': asdict(stats.for_side(PLAYER)),
            'opponent': asdict(stats.for_side(OPPONENT)),
            'game': {
                'total_turns': stats.total_turns,
                'start_time': stats.start_time,
                'end_time': stats.end_time,
            },
        },
    }
