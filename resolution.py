import random
from typing import Any, Dict, Optional

from models import NEUTRAL, MoveRecord, Territory
from state import GameState, add_to_history, log_event, side_label
from upkeep import check_win_condition, update_statistics


class AttackValidationError(Exception):
    """Exception raised when an attack is not legal."""
    pass


def roll_die(rng: Optional[random.Random] = None) -> int:
    """Roll a six-sided die."""
    return (rng or random).randint(1, 6)


def validate_attack(source: Optional[Territory], target: Optional[Territory]) -> bool:
    """Validate that ``source`` may attack ``target``."""
    if source is None or target is None:
        raise AttackValidationError("Attack requires two existing territories")

    if source.owner == NEUTRAL:
        raise AttackValidationError(f"Territory {source.id} has no owner to attack with")

    if source.owner == target.owner:
        raise AttackValidationError(f"Territory {target.id} already belongs to {side_label(source.owner)}")

    if not source.is_neighbor(target.id):
        raise AttackValidationError(f"Territory {target.id} is not adjacent to territory {source.id}")

    if source.units < 2:
        raise AttackValidationError(f"Territory {source.id} needs at least 2 units to attack")

    return True


def attack(game_state: GameState, source_id: int, target_id: int,
           rng: Optional[random.Random] = None) -> Optional[Dict[str, Any]]:
    """Resolve one attack from ``source_id`` on ``target_id``.

    Each side rolls one die. The attacker needs a strictly higher roll; ties go
    to the defender. A won roll costs the target one unit and conquers it at
    zero, moving all but one of the attacker's units in. A lost roll costs the
    attacker exactly one unit regardless of the margin.

    Returns:
        Dict with the rolls and outcome ('conquest', 'damage' or 'failed'),
        or None if the attack was rejected
    """
    source = game_state.get_territory(source_id)
    target = game_state.get_territory(target_id)

    try:
        validate_attack(source, target)
    except AttackValidationError as e:
        log_event(game_state, f"Attack rejected: {e}")
        return None

    attacker = source.owner
    defender = target.owner
    stats = game_state.statistics
    stats.for_side(attacker).attacks += 1

    attack_roll = roll_die(rng)
    defense_roll = roll_die(rng)
    result = {"attacker": attacker, "source": source.id, "target": target.id,
              "attack_roll": attack_roll, "defense_roll": defense_roll}

    target.flash = 1.0  # Flash regardless of outcome

    if attack_roll > defense_roll:
        target.units -= 1
        if target.units <= 0:
            # Conquest
            stats.for_side(attacker).successful_attacks += 1
            stats.for_side(attacker).territories_conquered += 1
            if defender != NEUTRAL:
                stats.for_side(defender).territories_lost += 1

            target.owner = attacker
            target.units = source.units - 1
            source.units = 1

            add_to_history(game_state, MoveRecord(
                type='conquest', player=attacker, source=source.id, target=target.id,
                turn=game_state.turn, defender=defender,
            ))
            log_event(game_state, f"{side_label(attacker)}: territory {target.id} conquered!")
            result["outcome"] = "conquest"

            check_win_condition(game_state)
        else:
            add_to_history(game_state, MoveRecord(
                type='attack', player=attacker, source=source.id, target=target.id,
                turn=game_state.turn, result='damage', defender=defender,
            ))
            log_event(game_state, f"{side_label(attacker)}: attack on {target.id} hits ({attack_roll} vs {defense_roll})")
            result["outcome"] = "damage"
    else:
        source.units -= 1
        source.flash = 1.0

        add_to_history(game_state, MoveRecord(
            type='attack', player=attacker, source=source.id, target=target.id,
            turn=game_state.turn, result='failed', defender=defender,
        ))
        log_event(game_state, f"{side_label(attacker)}: attack on {target.id} repelled ({attack_roll} vs {defense_roll})")
        result["outcome"] = "failed"

    update_statistics(game_state)
    return result
