import random
from typing import Optional

from models import ATTACK, REINFORCE, MoveRecord, Territory
from resolution import attack
from state import GameState, add_to_history, log_event, side_label
from upkeep import finish_reinforcements, update_statistics


class MoveValidationError(Exception):
    """Exception raised when a troop move fails validation."""
    pass


def validate_move(game_state: GameState, source: Optional[Territory], target: Optional[Territory],
                  troop_count: int) -> bool:
    """Validate a troop transfer between two territories of the current player."""
    if source is None or target is None:
        raise MoveValidationError("Move requires two existing territories")

    if source.id == target.id:
        raise MoveValidationError(f"Cannot move troops from territory {source.id} onto itself")

    if source.owner != game_state.current_player or target.owner != game_state.current_player:
        raise MoveValidationError(
            f"Territories {source.id} and {target.id} must both belong to {side_label(game_state.current_player)}"
        )

    if not source.is_neighbor(target.id):
        raise MoveValidationError(f"Territory {target.id} is not adjacent to territory {source.id}")

    if isinstance(troop_count, bool) or not isinstance(troop_count, int):
        raise MoveValidationError(f"Troop count must be an integer (got {troop_count!r})")

    if not 0 < troop_count < source.units:
        raise MoveValidationError(f"cannot move {troop_count} troops from territory {source.id} ({source.units} units)")

    return True


def move(game_state: GameState, source_id: int, target_id: int, troop_count: Optional[int] = None) -> bool:
    """
    Transfer troops between two adjacent territories of the current player.

    Args:
        game_state: Current game state
        source_id: Territory the troops leave
        target_id: Territory the troops join
        troop_count: Troops to move; defaults to all but one

    Returns:
        True if troops moved, False if the move was rejected (state unchanged)
    """
    if not game_state.is_ongoing:
        return False

    source = game_state.get_territory(source_id)
    target = game_state.get_territory(target_id)
    if troop_count is None and source is not None:
        troop_count = source.units - 1

    try:
        validate_move(game_state, source, target, troop_count)
    except MoveValidationError as e:
        log_event(game_state, f"Move rejected: {e}")
        return False

    target.units += troop_count
    source.units -= troop_count

    add_to_history(game_state, MoveRecord(
        type='move', player=game_state.current_player, source=source.id, target=target.id,
        turn=game_state.turn, units=troop_count,
    ))
    log_event(game_state, f"{side_label(game_state.current_player)}: moved {troop_count} troops to territory {target.id}")
    update_statistics(game_state)
    return True


def select_territory(game_state: GameState, territory_id: int, rng: Optional[random.Random] = None) -> None:
    """
    Handle a click on a territory; the single user-facing input event.

    In the reinforcement phase an owned territory receives one unit from the
    pool. In the attack phase the first click selects an owned territory with
    more than one unit, a second click on a neighbor attacks it (enemy or
    neutral) or moves troops into it (own), and a click on a non-neighbor
    switches the selection. Clicking the selection again clears it.
    """
    if not game_state.is_ongoing:
        return

    territory = game_state.get_territory(territory_id)
    if territory is None:
        log_event(game_state, f"Unknown territory {territory_id!r}")
        return

    current = game_state.current_player

    if game_state.phase == REINFORCE:
        if territory.owner == current and game_state.reinforcements_available > 0:
            territory.units += 1
            territory.flash = 1.0
            game_state.reinforcements_available -= 1
            game_state.statistics.for_side(current).total_units_deployed += 1
            update_statistics(game_state)
            if game_state.reinforcements_available == 0:
                finish_reinforcements(game_state)
        elif territory.owner == current:
            game_state.selected_id = territory.id
        return

    if game_state.phase != ATTACK:
        return

    if game_state.selected_id is None:
        if territory.owner == current and territory.units > 1:
            game_state.selected_id = territory.id
    elif game_state.selected_id == territory.id:
        game_state.selected_id = None
    else:
        source = game_state.get_territory(game_state.selected_id)
        if source.is_neighbor(territory.id):
            if territory.owner != current:
                attack(game_state, source.id, territory.id, rng=rng)
            else:
                move(game_state, source.id, territory.id)
            game_state.selected_id = None
        else:
            # Switch selection if not a neighbor
            game_state.selected_id = territory.id
