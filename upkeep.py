"""
Turn upkeep for the hex conquest game.
Handles reinforcement pools, victory checks, turn advancement and statistics.

- Reinforcements: max(MIN_REINFORCEMENTS, owned territories // REINFORCEMENT_RATE)
- Victory: the opponent is eliminated or the player holds every territory
- Defeat: the player is eliminated
- Turn counter advances only when control returns to the player
"""

import time

from models import (
    ATTACK, LOST, OPPONENT, PLAYER, REINFORCE, SIDES, WON,
    other_side,
)
from state import (
    MIN_REINFORCEMENTS, REINFORCEMENT_RATE, GameState, log_event, side_label,
)


def calculate_reinforcements(game_state: GameState) -> int:
    """
    Recompute the reinforcement pool for the current player.

    Args:
        game_state: Current game state

    Returns:
        The new number of reinforcements available
    """
    rate = game_state.config.get('reinforcement_rate', REINFORCEMENT_RATE)
    minimum = game_state.config.get('min_reinforcements', MIN_REINFORCEMENTS)
    owned = len(game_state.territories_of(game_state.current_player))

    game_state.reinforcements_available = max(minimum, owned // rate)
    return game_state.reinforcements_available


def check_win_condition(game_state: GameState) -> str:
    """
    Check victory conditions after a conquest.

    The player wins when the opponent holds nothing or the player holds the
    whole map, and loses when the player holds nothing. There is no stalemate.

    Args:
        game_state: Current game state

    Returns:
        The (possibly updated) game status
    """
    player_count = len(game_state.territories_of(PLAYER))
    opponent_count = len(game_state.territories_of(OPPONENT))
    total = len(game_state.territories)

    if opponent_count == 0 or player_count == total:
        game_state.status = WON
        log_event(game_state, "VICTORY! You have conquered the map.")
    elif player_count == 0:
        game_state.status = LOST
        log_event(game_state, "DEFEAT. The opponent has taken your last territory.")

    if not game_state.is_ongoing and game_state.statistics.end_time is None:
        game_state.statistics.end_time = time.time()

    return game_state.status


def update_statistics(game_state: GameState) -> None:
    """Raise each side's largest_army to its current biggest garrison."""
    for side in SIDES:
        owned = game_state.territories_of(side)
        if owned:
            stats = game_state.statistics.for_side(side)
            stats.largest_army = max(stats.largest_army, max(t.units for t in owned))


def next_turn(game_state: GameState) -> None:
    """
    Hand control to the other side.

    Does nothing once the game is over. Resets the phase to 'reinforce',
    clears the selection and computes the new side's reinforcements.
    """
    if not game_state.is_ongoing:
        return

    game_state.current_player = other_side(game_state.current_player)
    if game_state.current_player == PLAYER:
        game_state.turn += 1
        game_state.statistics.total_turns = game_state.turn

    game_state.phase = REINFORCE
    game_state.selected_id = None
    calculate_reinforcements(game_state)

    log_event(game_state, f"Turn {game_state.turn}: {side_label(game_state.current_player)} to move")


def finish_reinforcements(game_state: GameState) -> None:
    """Switch from the reinforcement phase to the attack phase."""
    game_state.phase = ATTACK
    log_event(game_state, "Reinforcement phase complete. Time to attack!")
