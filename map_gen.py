"""
Map generation module for the hex conquest game.
Builds a hexagon-shaped board on axial coordinates and assigns starting owners.
"""

import random
from typing import Dict, List, Optional, Tuple

from models import NEUTRAL, OPPONENT, PLAYER, Territory

# 6 directions: (1,0), (1,-1), (0,-1), (-1,0), (-1,1), (0,1)
HEX_DIRECTIONS = [(1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1)]

DEFAULT_RADIUS = 3
NEUTRAL_MIN_UNITS = 2
NEUTRAL_MAX_UNITS = 4
STARTING_UNITS = 5


class MapGenerationError(ValueError):
    """Exception raised when a map cannot be generated from the given parameters."""
    pass


def get_hex_neighbors(q: int, r: int) -> List[Tuple[int, int]]:
    """
    Get the 6 neighboring hex coordinates in axial system.

    Args:
        q: Axial coordinate q
        r: Axial coordinate r

    Returns:
        List of (q, r) coordinates for neighboring hexes
    """
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def hex_distance(q1: int, r1: int, q2: int, r2: int) -> int:
    """
    Calculate distance between two hexes using axial coordinates.

    Args:
        q1, r1: Coordinates of first hex
        q2, r2: Coordinates of second hex

    Returns:
        Distance between hexes
    """
    return max(abs(q1 - q2), abs(r1 - r2), abs(-(q1 + r1) + (q2 + r2)))


def hex_coordinates(radius: int) -> List[Tuple[int, int]]:
    """
    Enumerate every hex within ``radius`` of the origin.

    Coordinates are produced with q ascending, then r ascending; territory ids
    follow this order.
    """
    coords = []
    for q in range(-radius, radius + 1):
        r1 = max(-radius, -q - radius)
        r2 = min(radius, -q + radius)
        for r in range(r1, r2 + 1):
            coords.append((q, r))
    return coords


def link_neighbors(territories: List[Territory]) -> None:
    """Fill each territory's neighbor ids by coordinate lookup."""
    by_coords: Dict[Tuple[int, int], Territory] = {t.coords: t for t in territories}
    for territory in territories:
        territory.neighbors = tuple(
            by_coords[pos].id
            for pos in get_hex_neighbors(territory.q, territory.r)
            if pos in by_coords
        )


def assign_initial_territories(territories: List[Territory], starting_units: int = STARTING_UNITS) -> None:
    """
    Give the two extreme tiles along q to the player and the opponent.

    The sort is stable, so ties on q are broken by enumeration order: the player
    gets the first tile with the smallest q, the opponent the last tile with the
    largest q.
    """
    sorted_by_q = sorted(territories, key=lambda t: t.q)
    player_start = sorted_by_q[0]
    opponent_start = sorted_by_q[-1]

    player_start.owner = PLAYER
    player_start.units = starting_units

    opponent_start.owner = OPPONENT
    opponent_start.units = starting_units


def generate_map(
    radius: int = DEFAULT_RADIUS,
    rng: Optional[random.Random] = None,
    neutral_min_units: int = NEUTRAL_MIN_UNITS,
    neutral_max_units: int = NEUTRAL_MAX_UNITS,
    starting_units: int = STARTING_UNITS,
) -> List[Territory]:
    """
    Generate the territory graph for a new game.

    Args:
        radius: Hexagon radius in hexes (3 gives 37 territories)
        rng: Random generator for neutral garrisons (module random if omitted)
        neutral_min_units: Smallest neutral garrison
        neutral_max_units: Largest neutral garrison
        starting_units: Garrison of each side's starting territory

    Returns:
        Territories ordered by id, neighbors linked, starting owners assigned

    Raises:
        MapGenerationError: If radius is below 1
    """
    if radius < 1:
        raise MapGenerationError(f"Map radius must be at least 1 (got {radius})")

    rng = rng or random.Random()

    territories = [
        Territory(id=index, q=q, r=r, owner=NEUTRAL,
                  units=rng.randint(neutral_min_units, neutral_max_units))
        for index, (q, r) in enumerate(hex_coordinates(radius))
    ]

    link_neighbors(territories)
    assign_initial_territories(territories, starting_units)

    return territories
