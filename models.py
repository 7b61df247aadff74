# Models for game elements: territories, move history and statistics

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Owners
NEUTRAL = 'neutral'
PLAYER = 'player'
OPPONENT = 'opponent'
SIDES = (PLAYER, OPPONENT)

# Phases
REINFORCE = 'reinforce'
ATTACK = 'attack'

# Game status
ONGOING = 'ongoing'
WON = 'won'
LOST = 'lost'


def other_side(side: str) -> str:
    """Return the side opposing ``side`` ('player' <-> 'opponent')."""
    return OPPONENT if side == PLAYER else PLAYER


@dataclass
class Territory:
    """
    A single hex cell with an owner and a garrison.

    Neighbors are fixed when the map is generated and never change afterwards.
    ``flash`` is transient renderer feedback set to 1 when the territory is
    reinforced or involved in combat.
    """
    id: int
    q: int  # Axial coordinate q
    r: int  # Axial coordinate r
    owner: str = NEUTRAL  # 'neutral', 'player' or 'opponent'
    units: int = 0
    neighbors: Tuple[int, ...] = ()
    flash: float = 0.0

    @property
    def coords(self) -> Tuple[int, int]:
        return (self.q, self.r)

    def is_neighbor(self, territory_id: int) -> bool:
        return territory_id in self.neighbors


@dataclass
class MoveRecord:
    """One entry of the move history feed."""
    type: str  # 'conquest', 'attack' or 'move'
    player: str
    source: int
    target: int
    turn: int
    result: Optional[str] = None  # 'damage' or 'failed' for attacks
    units: Optional[int] = None  # Troops transferred by a move
    defender: Optional[str] = None  # Owner of the target before the action


@dataclass
class PlayerStatistics:
    """Per-side counters kept for the end-of-game summary."""
    attacks: int = 0
    successful_attacks: int = 0
    territories_conquered: int = 0
    territories_lost: int = 0
    largest_army: int = 0
    total_units_deployed: int = 0


@dataclass
class GameStatistics:
    """Statistics for both sides plus game-level timestamps."""
    start_time: float
    sides: Dict[str, PlayerStatistics] = field(
        default_factory=lambda: {side: PlayerStatistics() for side in SIDES}
    )
    total_turns: int = 1
    end_time: Optional[float] = None

    def for_side(self, side: str) -> PlayerStatistics:
        return self.sides[side]
