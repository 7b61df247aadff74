"""Shared test fixtures and helpers."""

import random

import pytest

from map_gen import link_neighbors
from models import ATTACK, NEUTRAL, OPPONENT, PLAYER, Territory
from session import GameSession
from state import GameState, initialize_game


# --- Fixtures ---


@pytest.fixture
def game():
    """Fresh game at the player's first reinforcement phase (seed=42)."""
    return initialize_game('normal', seed=42)


@pytest.fixture
def rng():
    """Deterministic RNG seeded at 42."""
    return random.Random(42)


@pytest.fixture
def session():
    """Session with a fresh game and no thinking delays."""
    s = GameSession(delay_scale=0)
    s.create_game('normal', seed=42)
    return s


@pytest.fixture
def front_state():
    """
    A short front line along r=0 during the player's attack phase.

    ids: 0 (0,0) player 5 | 1 (1,0) opponent 2 | 2 (2,0) neutral 3
         3 (0,1) player 1 | 4 (-1,0) player 3
    """
    return make_state([
        (0, 0, PLAYER, 5),
        (1, 0, OPPONENT, 2),
        (2, 0, NEUTRAL, 3),
        (0, 1, PLAYER, 1),
        (-1, 0, PLAYER, 3),
    ])


# --- Helper functions ---


def make_state(cells, current_player=PLAYER, phase=ATTACK, reinforcements=0):
    """
    Build a small game state from (q, r, owner, units) tuples.

    Territory ids follow the order of ``cells``; neighbors are linked by axial
    adjacency exactly as the map generator does.
    """
    territories = [
        Territory(id=index, q=q, r=r, owner=owner, units=units)
        for index, (q, r, owner, units) in enumerate(cells)
    ]
    link_neighbors(territories)
    return GameState(
        territories=territories,
        current_player=current_player,
        phase=phase,
        reinforcements_available=reinforcements,
    )


def owned_units_valid(game_state):
    """Every owned territory keeps at least one unit."""
    return all(t.units >= 1 for t in game_state.territories if t.owner != NEUTRAL)
