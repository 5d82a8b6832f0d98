"""
The World Model: the shared, read-only graph of locations and items.

Nothing in here changes during play. Where an item currently is, and any
property a turn changes, lives in the session's SessionState so one World
can back any number of sessions.
"""
from dataclasses import dataclass, field

from .conditions import condition_references
from .errors import ConfigurationError

SCALAR_TYPES = (bool, int, float, str)


def is_scalar(value):
    return isinstance(value, SCALAR_TYPES)


# ==========================================================
# DEFINITIONS
# ==========================================================
@dataclass(frozen=True)
class Item:
    id: str
    name: str
    description: str = ""
    portable: bool = True
    properties: dict = field(default_factory=dict)
    # flags set when the player takes this item
    take_flags: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Exit:
    target: str
    condition: object = None

    @property
    def conditional(self):
        return self.condition is not None


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    description: str = ""
    items: tuple = ()
    exits: dict = field(default_factory=dict)
    first_visit: str = ""


# ==========================================================
# THE WORLD
# ==========================================================
class World:
    def __init__(self, locations, items=()):
        self.locations = {}
        self.items = {}
        problems = []

        for item in items:
            if item.id in self.items:
                problems.append(f"duplicate item id '{item.id}'")
            self.items[item.id] = item
        for location in locations:
            if location.id in self.locations:
                problems.append(f"duplicate location id '{location.id}'")
            self.locations[location.id] = location

        problems.extend(self._check_references())
        if problems:
            raise ConfigurationError(problems)

    def _check_references(self):
        problems = []
        placed = {}
        for location in self.locations.values():
            for direction, exit_ in location.exits.items():
                if exit_.target not in self.locations:
                    problems.append(
                        f"exit '{direction}' of '{location.id}' leads to unknown location '{exit_.target}'"
                    )
                problems.extend(self.check_condition(exit_.condition, f"exit '{direction}' of '{location.id}'"))
            for item_id in location.items:
                if item_id not in self.items:
                    problems.append(f"location '{location.id}' holds unknown item '{item_id}'")
                elif item_id in placed:
                    problems.append(f"item '{item_id}' is placed in both '{placed[item_id]}' and '{location.id}'")
                else:
                    placed[item_id] = location.id
        for item in self.items.values():
            for key, value in list(item.properties.items()) + list(item.take_flags.items()):
                if not is_scalar(value):
                    problems.append(f"item '{item.id}' has non-scalar value for '{key}'")
        return problems

    def check_condition(self, condition, where):
        problems = []
        for kind, ref in condition_references(condition):
            known = self.items if kind == "item" else self.locations
            if ref not in known:
                problems.append(f"{where} checks unknown {kind} '{ref}'")
        return problems

    def location(self, location_id):
        return self.locations[location_id]

    def item(self, item_id):
        return self.items[item_id]

    def exit_tokens(self):
        """Every direction token any location declares, in first-seen order."""
        tokens = {}
        for location in self.locations.values():
            for direction in location.exits:
                tokens.setdefault(direction.lower(), None)
        return list(tokens)

    def match_item(self, fragment, candidates):
        """
        Resolves a player's item fragment against candidate item IDs.
        First candidate whose display name contains the fragment (or whose
        id equals it), case-insensitive, wins.
        """
        fragment = fragment.strip().lower()
        if not fragment:
            return None
        for item_id in candidates:
            item = self.items.get(item_id)
            if item is None:
                continue
            if fragment in item.name.lower() or fragment == item.id.lower():
                return item
        return None
