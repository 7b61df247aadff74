"""
Scoring heuristics for the opponent.

Strategy selection, reinforcement scoring, attack and repositioning scoring,
and the imperfect choice policy that occasionally passes over the best option.
All functions are pure reads of the game state; randomness comes from the rng
argument so decisions are reproducible under a seed.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar

from models import NEUTRAL, Territory, other_side
from opponent.personality import Memory, Personality
from state import GameState

EXPAND = "expand"
DEFEND = "defend"
AGGRESS = "aggress"
STRATEGIES = (EXPAND, DEFEND, AGGRESS)

DEFEND_MIN_ADVANTAGE = 3
CRITICAL_BORDER_UNITS = 3
CRITICAL_BORDER_BONUS = 40
LAST_ATTACK_ORIGIN_BONUS = 30

T = TypeVar("T")


@dataclass
class Candidate:
    """A scored option: a reinforcement target, an attack or a repositioning move."""
    score: float
    source: Territory
    target: Optional[Territory] = None


def choose_strategy(game_state: GameState, side: str, memory: Memory,
                    personality: Personality, rng: random.Random) -> str:
    """Pick this turn's strategy from relative strength and free land."""
    neutral_count = len(game_state.territories_of(NEUTRAL))
    my_strength = game_state.strength_of(side)
    enemy_strength = game_state.strength_of(other_side(side))

    if neutral_count > 3 and memory.turns_played < 5:
        # Early game - expand
        return EXPAND
    if my_strength < enemy_strength * 0.7:
        return DEFEND
    if my_strength > enemy_strength * 1.3 or rng.random() < personality.aggression * 0.5:
        return AGGRESS

    roll = rng.random()
    if roll < 0.4:
        return EXPAND
    if roll < 0.7:
        return DEFEND
    return AGGRESS


def score_reinforcement(game_state: GameState, territory: Territory, side: str,
                        strategy: str, memory: Memory) -> float:
    """Score one owned territory as a reinforcement target."""
    enemy = other_side(side)
    neighbors = game_state.neighbors_of(territory)
    enemy_neighbors = [n for n in neighbors if n.owner == enemy]
    neutral_neighbors = [n for n in neighbors if n.owner == NEUTRAL]

    score = 0
    if strategy == DEFEND:
        if enemy_neighbors:
            threat = sum(n.units for n in enemy_neighbors)
            score = 50 + threat * 2 - territory.units
            if memory.last_attack_origin is not None and any(
                n.id == memory.last_attack_origin for n in enemy_neighbors
            ):
                score += LAST_ATTACK_ORIGIN_BONUS
    elif strategy == AGGRESS:
        if enemy_neighbors:
            weakest = min(n.units for n in enemy_neighbors)
            score = 40 + (territory.units - weakest) * 3
    else:
        if neutral_neighbors:
            score = 30 + len(neutral_neighbors) * 10
        elif enemy_neighbors:
            score = 20

    # Critical reinforcement of weak borders
    if territory.units < CRITICAL_BORDER_UNITS and enemy_neighbors:
        score += CRITICAL_BORDER_BONUS

    return score


def score_attack(source: Territory, target: Territory, side: str, strategy: str,
                 personality: Personality, rng: random.Random, expert: bool = False) -> float:
    """
    Score an attack from ``source`` on ``target``; zero or less means "don't".

    Risky options draw from ``rng`` against the personality's risk tolerance,
    so the same pair may score differently on different calls.
    """
    advantage = source.units - target.units

    if target.owner == other_side(side):
        if strategy == AGGRESS:
            if advantage > 0:
                return 50 + advantage * 4
            if advantage > -2 and rng.random() < personality.risk_tolerance:
                return 20  # Calculated risk
            if expert and advantage > -3 and source.units > 3:
                return 15
            return 0
        if strategy == DEFEND:
            if advantage >= DEFEND_MIN_ADVANTAGE:
                return 30 + advantage * 2
            return 0
        if advantage > 0:
            return 35 + advantage * 3
        if source.units > 5 and rng.random() < personality.risk_tolerance * 0.5:
            return 15
        return 0

    if target.owner == NEUTRAL:
        if strategy == EXPAND:
            return 40 + advantage * 2
        if strategy == DEFEND and advantage < DEFEND_MIN_ADVANTAGE:
            return 0
        return 20 + advantage

    return 0


def score_reposition(game_state: GameState, target: Territory, side: str, strategy: str) -> float:
    """Score moving troops from the interior into ``target``."""
    target_neighbors = game_state.neighbors_of(target)
    borders_enemy = any(n.owner == other_side(side) for n in target_neighbors)
    borders_neutral = any(n.owner == NEUTRAL for n in target_neighbors)

    if borders_enemy:
        return 30 if strategy == DEFEND else 20
    if borders_neutral and strategy == EXPAND:
        return 25
    return 1


def reinforcement_candidates(game_state: GameState, side: str, strategy: str,
                             memory: Memory) -> List[Candidate]:
    """Every owned territory scored as a reinforcement target, best first."""
    scored = [
        Candidate(score_reinforcement(game_state, t, side, strategy, memory), t)
        for t in game_state.territories_of(side)
    ]
    return sorted(scored, key=lambda c: c.score, reverse=True)


def action_candidates(game_state: GameState, side: str, strategy: str, personality: Personality,
                      rng: random.Random, expert: bool = False):
    """
    Score every attack and interior repositioning available to ``side``.

    Returns:
        Tuple of (attacks, moves), each sorted best first. Only attacks with a
        positive score are included.
    """
    attacks: List[Candidate] = []
    moves: List[Candidate] = []

    for source in game_state.territories_of(side):
        neighbors = game_state.neighbors_of(source)

        if source.units > 1:
            for target in neighbors:
                if target.owner == side:
                    continue
                score = score_attack(source, target, side, strategy, personality, rng, expert)
                if score > 0:
                    attacks.append(Candidate(score, source, target))

        # Move troops from the rear to the front
        if source.units > 3 and all(n.owner == side for n in neighbors):
            for target in neighbors:
                moves.append(Candidate(score_reposition(game_state, target, side, strategy), source, target))

    attacks.sort(key=lambda c: c.score, reverse=True)
    moves.sort(key=lambda c: c.score, reverse=True)
    return attacks, moves


def pick_imperfect(ranked: Sequence[T], focus_level: float, rng: random.Random,
                   focused_width: int = 1, unfocused_width: int = 3) -> T:
    """
    Pick from a best-first list the way a distracted human would.

    With probability ``1 - focus_level`` an index is drawn uniformly from
    ``range(unfocused_width)`` and clamped to the last entry, so short lists
    lean towards their tail. Otherwise the choice is uniform among the top
    ``focused_width``.
    """
    if not ranked:
        raise ValueError("No candidates to choose from")

    if rng.random() >= focus_level:
        return ranked[min(rng.randrange(unfocused_width), len(ranked) - 1)]
    return ranked[rng.randrange(min(focused_width, len(ranked)))]
