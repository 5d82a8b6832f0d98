import json
import logging
import os
import sys
import time

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.theme import Theme

from .config import load_config, save_config
from .errors import RulebookError, SaveFileError
from .formatter import describe_location
from .loader import load_game_file
from .state import SessionState

UNDO_DEPTH = 10
META_QUIT = ("quit", "exit", "menu")

# 1. SETUP THEME
custom_theme = Theme({
    "info": "bold #b0d8e3",       # Pale Cyan
    "text": "default",
    "dim": "dim",
    "warning": "bold #ffafaf",    # Soft red
    "success": "bold #a3be8c",    # Soft green
})

console = Console(theme=custom_theme)
logger = logging.getLogger(__name__)


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def setup_logging(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def list_stories(stories_dir):
    if not os.path.isdir(stories_dir):
        return []
    return sorted(f for f in os.listdir(stories_dir) if f.endswith((".yaml", ".yml")))


# ============================================
# SAVE FILES
# ============================================
def save_path(config, story_id):
    return os.path.join(config.get("save_dir", "saves"), f"{story_id}.json")


def save_session(path, state):
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
    except OSError as e:
        raise SaveFileError(f"could not write {path}: {e}") from e


def load_session(path, game):
    try:
        with open(path, "r", encoding="utf-8") as f:
            state = SessionState.from_dict(json.load(f))
    except FileNotFoundError as e:
        raise SaveFileError("No save file found.") from e
    except (OSError, ValueError, KeyError) as e:
        raise SaveFileError(f"could not read {path}: {e}") from e

    if state.current_location not in game.world.locations:
        raise SaveFileError(f"save file places you in unknown location '{state.current_location}'")
    return state


def remember(history, state, depth=UNDO_DEPTH):
    """Pushes a state onto the undo history, keeping only the newest `depth`."""
    history.append(state)
    del history[:-depth]
    return history


# ============================================
# GAME LOOP
# ============================================
def play(game, story_id, config):
    """Runs one story until the player quits. The host owns history and saves."""
    opening = game.begin()
    state = opening.state
    history = []

    console.print(Panel(f"[bold blue]{game.title}[/bold blue]", title="STORY STARTED", border_style="info"))
    if game.intro:
        console.print(f"\n{game.intro}")
    console.print(f"\n{opening.text}")
    console.print("[dim]Type 'save', 'load', 'undo' or 'quit'.[/dim]\n")

    while True:
        user_input = Prompt.ask("[info]>[/info]").strip()
        command = user_input.lower()

        if command in META_QUIT:
            break
        if command == "save":
            try:
                save_session(save_path(config, story_id), state)
                console.print("[success]Saved.[/success]")
            except SaveFileError as e:
                console.print(f"[warning]{e}[/warning]")
            continue
        if command == "load":
            try:
                state = load_session(save_path(config, story_id), game)
                history.clear()
                console.print("[success]Loaded.[/success]")
                console.print(describe_location(game.world, state))
            except SaveFileError as e:
                console.print(f"[warning]{e}[/warning]")
            continue
        if command == "undo":
            if not history:
                console.print("Nothing to undo.")
            else:
                state = history.pop()
                console.print("Undone.")
                console.print(describe_location(game.world, state))
            continue

        result = game.process_command(state, user_input)
        remember(history, state)
        state = result.state
        console.print(Panel(result.text, border_style="info"))


# ============================================
# MENU
# ============================================
def show_welcome_screen(config, stories):
    clear_screen()

    welcome_md = Markdown(
        "# RULEBOOK\n\n"
        "Interactive fiction, one rule at a time.\n\n"
        "> *Rules decide. The first to claim your words wins.*"
    )
    console.print(Panel(welcome_md, border_style="info", padding=(1, 2), width=60))
    console.print("\n[dim]Select an option:[/dim]\n")

    for index, story in enumerate(stories, start=1):
        console.print(f" [[info]{index}[/info]] Play {story}")
    debug_state = "On" if config.get("debug_mode", False) else "Off"
    console.print(f" [[info]D[/info]] Toggle Debug Mode (current: {debug_state})")
    console.print(" [[info]Q[/info]] Quit")

    print()
    choices = [str(i) for i in range(1, len(stories) + 1)] + ["D", "Q"]
    return Prompt.ask(" >", choices=choices, default=choices[0])


def toggle_debug(config):
    """Toggles the debug_mode flag in config.yaml."""
    config['debug_mode'] = not config.get('debug_mode', False)
    save_config(config)
    setup_logging(config['debug_mode'])
    console.print(Panel(
        f"[info]DEBUG MODE:[/][bold]{' ON' if config['debug_mode'] else ' OFF'}[/bold]",
        border_style="info"
    ))
    time.sleep(1)


def start_story(config, filename):
    clear_screen()
    path = os.path.join(config["stories_dir"], filename)
    logger.debug("Starting story from %s", path)
    try:
        game = load_game_file(path)
    except RulebookError as e:
        console.print(Panel(f"[warning]STORY LOAD ERROR:[/]\n{e}", border_style="warning"))
        time.sleep(3)
        return
    play(game, os.path.splitext(filename)[0], config)


def main():
    load_dotenv()
    config = load_config()
    setup_logging(config.get("debug_mode", False))

    while True:
        config = load_config()
        stories = list_stories(config["stories_dir"])
        choice = show_welcome_screen(config, stories)

        if choice.upper() == "Q":
            console.print("\nGoodbye.")
            sys.exit()
        elif choice.upper() == "D":
            toggle_debug(config)
        else:
            start_story(config, stories[int(choice) - 1])


if __name__ == "__main__":
    main()
