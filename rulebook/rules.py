"""
Rules and the Rulebook registry.

A Rule is a named handler with the signature

    handler(text, state, world) -> str or None

Returning a string claims the input (an empty string is a valid claim);
returning None means "not mine" and must leave the state untouched.
Registration order is priority order.
"""
import re
from dataclasses import dataclass

from .exits import resolve
from .formatter import describe_inventory, describe_location
from .state import INVENTORY

CANT_GO = "You can't go that way."
NOT_HERE = "You don't see that here."


@dataclass(frozen=True)
class Rule:
    name: str
    handler: object
    # (kind, id) pairs checked when the game is loaded
    references: tuple = ()

    def try_handle(self, text, state, world):
        return self.handler(text, state, world)


def normalize(text):
    return " ".join(text.split())


def strip_article(fragment):
    words = fragment.split()
    if len(words) > 1 and words[0].lower() in ("the", "a", "an"):
        words = words[1:]
    return " ".join(words)


def pattern_rule(name, pattern, action):
    """
    Wraps `action(match, state, world)` in a rule that only fires when the
    whole input matches `pattern`, case-insensitively.
    """
    regex = re.compile(pattern, re.IGNORECASE)

    def handler(text, state, world):
        match = regex.fullmatch(normalize(text))
        if match is None:
            return None
        return action(match, state, world)

    return Rule(name, handler)


def arrive(world, state):
    """Describes the current location and records its first-visit text as shown."""
    text = describe_location(world, state)
    state.first_visits_seen.add(state.current_location)
    return text


class Rulebook:
    """Ordered rule registry. Games freeze it into a tuple when built."""

    def __init__(self, rules=()):
        self._rules = []
        for rule in rules:
            self.add(rule)

    def add(self, rule):
        if any(existing.name == rule.name for existing in self._rules):
            raise ValueError(f"a rule named '{rule.name}' is already registered")
        self._rules.append(rule)
        return rule

    def extend(self, rules):
        for rule in rules:
            self.add(rule)

    def when(self, pattern, name=None):
        """Decorator registering `func(match, state, world)` as a pattern rule."""
        def dec(func):
            self.add(pattern_rule(name or func.__name__, pattern, func))
            return func
        return dec

    def names(self):
        return [rule.name for rule in self._rules]

    def __iter__(self):
        return iter(self._rules)

    def __len__(self):
        return len(self._rules)


# ==========================================================
# STANDARD RULES
# ==========================================================
STANDARD_DIRECTIONS = (
    "north", "south", "east", "west",
    "northeast", "northwest", "southeast", "southwest",
    "up", "down", "in", "out",
)
DIRECTION_ALIASES = {
    "n": "north", "s": "south", "e": "east", "w": "west",
    "ne": "northeast", "nw": "northwest", "se": "southeast", "sw": "southwest",
    "u": "up", "d": "down",
}
MOVE_VERBS = ("go", "walk", "move")


def _direction_token(text):
    words = normalize(text).lower().split()
    if len(words) > 1 and words[0] in MOVE_VERBS:
        words = words[1:]
    return " ".join(words)


def _movement(text, state, world):
    token = _direction_token(text)
    if not token:
        return None
    if (token not in STANDARD_DIRECTIONS and token not in DIRECTION_ALIASES
            and token not in world.exit_tokens()):
        return None

    # an exit declared under the literal token beats the alias
    location = world.location(state.current_location)
    exit_ = resolve(location, token, state)
    if exit_ is None and token in DIRECTION_ALIASES:
        exit_ = resolve(location, DIRECTION_ALIASES[token], state)
    if exit_ is None:
        return CANT_GO

    state.visited.add(state.current_location)
    state.current_location = exit_.target
    return arrive(world, state)


def _look(match, state, world):
    return describe_location(world, state)


def _inventory(match, state, world):
    return describe_inventory(world, state)


def _take(match, state, world):
    fragment = strip_article(match.group("item"))
    item = world.match_item(fragment, state.items_at(state.current_location))
    if item is None:
        if world.match_item(fragment, state.inventory):
            return "You already have that."
        return NOT_HERE
    if not item.portable:
        return "You can't take that."

    state.take_item(item.id)
    for flag, value in item.take_flags.items():
        state.set_flag(flag, value)
    return f"You take the {item.name}."


def _drop(match, state, world):
    item = world.match_item(strip_article(match.group("item")), state.inventory)
    if item is None:
        return "You aren't carrying that."
    state.drop_item(item.id)
    return f"You drop the {item.name}."


def _examine(match, state, world):
    fragment = strip_article(match.group("item"))
    # location first, then what the player carries
    item = world.match_item(fragment, state.items_at(state.current_location))
    if item is None:
        item = world.match_item(fragment, state.inventory)
    if item is None:
        return NOT_HERE
    state.set_item_property(item.id, "examined", True)
    return item.description or f"You see nothing special about the {item.name}."


def _wait(match, state, world):
    return "Time passes."


def _help(match, state, world):
    return (
        "Commands: look, inventory, take <item>, drop <item>, examine <item>, "
        "go <direction> (or just the direction), wait."
    )


def movement_rule():
    return Rule("movement", _movement)


def look_rule():
    return pattern_rule("look", r"look|l|look around", _look)


def inventory_rule():
    return pattern_rule("inventory", r"inventory|inv|i", _inventory)


def take_rule():
    return pattern_rule("take", r"(?:take|get|grab|pick up)\s+(?P<item>.+)", _take)


def drop_rule():
    return pattern_rule("drop", r"(?:drop|discard|put down)\s+(?P<item>.+)", _drop)


def examine_rule():
    return pattern_rule("examine", r"(?:examine|inspect|read|x|look at)\s+(?P<item>.+)", _examine)


def wait_rule():
    return pattern_rule("wait", r"wait|z", _wait)


def help_rule():
    return pattern_rule("help", r"help|\?", _help)


BUILTINS = {
    "movement": movement_rule,
    "look": look_rule,
    "inventory": inventory_rule,
    "take": take_rule,
    "drop": drop_rule,
    "examine": examine_rule,
    "wait": wait_rule,
    "help": help_rule,
}


def standard_rules():
    return [factory() for factory in BUILTINS.values()]


# ==========================================================
# SCRIPTED RULES
# ==========================================================
@dataclass(frozen=True)
class Effect:
    """One declared state change: set, clear, give, remove, move_item, move_player."""
    kind: str
    target: str
    value: object = None

    def references(self):
        if self.kind in ("give", "remove", "move_item"):
            yield "item", self.target
        if self.kind == "move_item" and self.value not in (None, INVENTORY):
            yield "location", self.value
        if self.kind == "move_player":
            yield "location", self.target


EFFECT_KINDS = ("set", "clear", "give", "remove", "move_item", "move_player")


def apply_effect(effect, state):
    if effect.kind == "set":
        state.set_flag(effect.target, True if effect.value is None else effect.value)
    elif effect.kind == "clear":
        state.clear_flag(effect.target)
    elif effect.kind == "give":
        state.take_item(effect.target)
    elif effect.kind == "remove":
        state.move_item(effect.target, None)
    elif effect.kind == "move_item":
        state.move_item(effect.target, effect.value)
    elif effect.kind == "move_player":
        state.visited.add(state.current_location)
        state.current_location = effect.target
    else:
        raise ValueError(f"unknown effect kind '{effect.kind}'")


def scripted_rule(name, pattern, message, *, at=None, when=None, effects=(), otherwise=None, describe=False):
    """
    A declarative puzzle rule. Fires when the input matches `pattern` and the
    player is `at` the given location (if any). If `when` does not hold it
    answers `otherwise`, or passes when there is no `otherwise`.
    """
    regex = re.compile(pattern, re.IGNORECASE)
    effects = tuple(effects)

    def handler(text, state, world):
        if regex.fullmatch(normalize(text)) is None:
            return None
        if at is not None and state.current_location != at:
            return None
        if when is not None and not when(state):
            return otherwise

        for effect in effects:
            apply_effect(effect, state)
        if describe:
            description = arrive(world, state)
            return f"{message}\n{description}" if message else description
        return message

    references = []
    if at is not None:
        references.append(("location", at))
    for effect in effects:
        references.extend(effect.references())
    if when is not None and hasattr(when, "references"):
        references.extend(when.references())
    return Rule(name, handler, tuple(references))
