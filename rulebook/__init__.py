from .conditions import AllOf, AnyOf, At, FlagIs, Has, Not, Visited, parse_condition
from .director import FALLBACK, Director, Game, TurnResult
from .errors import ConfigurationError, RulebookError, SaveFileError
from .loader import load_game, load_game_file
from .rules import Effect, Rule, Rulebook, pattern_rule, scripted_rule, standard_rules
from .state import INVENTORY, SessionState, build_initial_state
from .world import Exit, Item, Location, World

__all__ = [
    "AllOf",
    "AnyOf",
    "At",
    "ConfigurationError",
    "Director",
    "Effect",
    "Exit",
    "FALLBACK",
    "FlagIs",
    "Game",
    "Has",
    "INVENTORY",
    "Item",
    "Location",
    "Not",
    "Rule",
    "Rulebook",
    "RulebookError",
    "SaveFileError",
    "SessionState",
    "TurnResult",
    "Visited",
    "World",
    "build_initial_state",
    "load_game",
    "load_game_file",
    "parse_condition",
    "pattern_rule",
    "scripted_rule",
    "standard_rules",
]
