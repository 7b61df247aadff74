"""
Heuristic opponent: personalities, scoring heuristics and the turn driver.
"""

from opponent.agent import OpponentAI
from opponent.personality import DIFFICULTY_PRESETS, Memory, Personality, create_personality
from opponent.scoring import AGGRESS, DEFEND, EXPAND, STRATEGIES

__all__ = [
    "OpponentAI",
    "DIFFICULTY_PRESETS",
    "Memory",
    "Personality",
    "create_personality",
    "AGGRESS",
    "DEFEND",
    "EXPAND",
    "STRATEGIES",
]
