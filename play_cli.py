"""
CLI play mode for the hex conquest game.

Human vs heuristic opponent on a hexagonal board. ASCII renderer,
reinforcement and attack entry, opponent turns, full game loop.

Usage: python play_cli.py
"""

import asyncio
import math
import time

from models import NEUTRAL, ONGOING, OPPONENT, PLAYER, REINFORCE, WON
from opponent import DIFFICULTY_PRESETS
from session import GameSession

OWNER_CHAR = {
    PLAYER: "P",
    OPPONENT: "O",
    NEUTRAL: ".",
}

HELP = """Commands:
  s <id>              select / reinforce territory <id>
  m <from> <to> [n]   move n troops (default: all but one)
  end                 end your turn
  status              show statistics
  log                 show recent log entries
  quit                leave the game"""


# ---------------------------------------------------------------------------
# ASCII Hex Renderer
# ---------------------------------------------------------------------------


def render_board(state: dict):
    """Print the board, one axial row per line, each cell as id+owner+units."""
    rows = {}
    for t in state["territories"]:
        rows.setdefault(t["r"], []).append(t)

    print()
    for r in sorted(rows):
        cells = []
        for t in sorted(rows[r], key=lambda t: t["q"]):
            marker = "*" if t["id"] == state["selected_id"] else " "
            cells.append(f"{marker}{t['id']:>2}{OWNER_CHAR[t['owner']]}{t['units']:<2}")
        print(" " * (abs(r) * 3) + " ".join(cells))
    print()


def show_header(state: dict):
    side = "You" if state["current_player"] == PLAYER else "Opponent"
    line = f"Turn {state['turn']} | {side} | phase: {state['phase']}"
    if state["phase"] == REINFORCE:
        line += f" | reinforcements: {state['reinforcements_available']}"
    print(line)


def show_status(state: dict):
    stats = state["statistics"]
    for side in ("player", "opponent"):
        s = stats[side]
        owned = sum(1 for t in state["territories"] if t["owner"] == side)
        print(f"  {side:<9} territories={owned:<3} attacks={s['attacks']:<3} "
              f"conquered={s['territories_conquered']:<3} lost={s['territories_lost']:<3} "
              f"largest army={s['largest_army']}")


def show_log(state: dict, count: int = 8):
    for entry in state["logs"][-count:]:
        print(f"  {entry}")


def format_elapsed(seconds: int) -> str:
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes}m {seconds}s" if minutes > 0 else f"{seconds}s"


def game_over_summary(state: dict) -> dict:
    """
    Headline numbers for the end-of-game screen, taken from the winner's side.

    Returns:
        Dict with winner, territories held, total territories, elapsed
        seconds and the winner's attack success rate in percent
    """
    winner = PLAYER if state["status"] == WON else OPPONENT
    stats = state["statistics"][winner]
    game = state["statistics"]["game"]
    end_time = game["end_time"] if game["end_time"] is not None else time.time()

    success_rate = 0
    if stats["attacks"] > 0:
        success_rate = math.floor(stats["successful_attacks"] / stats["attacks"] * 100 + 0.5)

    return {
        "winner": winner,
        "territories": sum(1 for t in state["territories"] if t["owner"] == winner),
        "total": len(state["territories"]),
        "elapsed": int(end_time - game["start_time"]),
        "success_rate": success_rate,
    }


def show_game_over(state: dict):
    summary = game_over_summary(state)
    print("You won!" if summary["winner"] == PLAYER else "You lost.")
    print(f"  {summary['winner']} holds {summary['territories']}/{summary['total']} territories "
          f"after {state['turn']} turns ({format_elapsed(summary['elapsed'])})")
    print(f"  attack success rate: {summary['success_rate']}%")
    show_status(state)


def new_log_entries(before: list, after: list) -> list:
    """Entries appended to a bounded log between two snapshots."""
    for shift in range(len(before) + 1):
        kept = len(before) - shift
        if before[shift:] == after[:kept]:
            return after[kept:]
    return after


def choose_difficulty() -> str:
    names = list(DIFFICULTY_PRESETS)
    print("Difficulty: " + ", ".join(names) + " (default normal)")
    raw = input("> ").strip().lower()
    return raw if raw in DIFFICULTY_PRESETS else "normal"


# ---------------------------------------------------------------------------
# Human turn
# ---------------------------------------------------------------------------


def human_turn(session: GameSession) -> bool:
    """Read commands until the player ends the turn. Returns False on quit."""
    while True:
        state = session.get_state()
        if state["status"] != ONGOING:
            return True

        render_board(state)
        show_header(state)
        raw = input("> ").strip()
        if not raw:
            continue
        parts = raw.split()
        cmd, args = parts[0].lower(), parts[1:]

        try:
            numbers = [int(a) for a in args]
        except ValueError:
            print("  Territory ids and troop counts must be numbers.")
            continue

        logs_before = state["logs"]
        if cmd in ("s", "select") and len(numbers) == 1:
            session.select_territory(numbers[0])
        elif cmd in ("m", "move") and len(numbers) in (2, 3):
            session.move(*numbers)
        elif cmd == "end":
            session.next_turn()
            return True
        elif cmd == "status":
            show_status(state)
            continue
        elif cmd == "log":
            show_log(state)
            continue
        elif cmd in ("quit", "exit"):
            return False
        else:
            print(HELP)
            continue

        # Echo whatever the rules reported
        for entry in new_log_entries(logs_before, session.get_state()["logs"]):
            print(f"  {entry}")


def main():
    print("=== HEX CONQUEST ===")
    session = GameSession()
    session.create_game(choose_difficulty())
    print(HELP)

    while session.get_state()["status"] == ONGOING:
        if not human_turn(session):
            print("Goodbye.")
            return
        if session.opponent_to_move:
            print("\nOpponent is thinking...")
            logs_before = session.get_state()["logs"]
            asyncio.run(session.play_opponent_turn())
            for entry in new_log_entries(logs_before, session.get_state()["logs"]):
                print(f"  {entry}")

    state = session.get_state()
    render_board(state)
    show_game_over(state)


if __name__ == "__main__":
    main()
