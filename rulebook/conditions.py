"""
Serialisable condition expressions.

Conditions gate exits and scripted rules. They are read-only predicates
over a SessionState: calling one never mutates the state it is given.
Games written in Python may use any callable with the same signature;
games loaded from YAML only ever get the expressions below, so an
untrusted story file cannot run code.
"""
from dataclasses import dataclass

from .errors import ConfigurationError

_MISSING = object()


class Condition:
    def __call__(self, state):
        raise NotImplementedError

    def references(self):
        """Yields (kind, id) pairs naming the items/locations this checks."""
        return iter(())


@dataclass(frozen=True)
class FlagIs(Condition):
    flag: str
    expected: object = _MISSING

    def __call__(self, state):
        value = state.flags.get(self.flag)
        if self.expected is _MISSING:
            return bool(value)
        return value == self.expected


@dataclass(frozen=True)
class Has(Condition):
    item_id: str

    def __call__(self, state):
        return self.item_id in state.inventory

    def references(self):
        yield "item", self.item_id


@dataclass(frozen=True)
class At(Condition):
    location_id: str

    def __call__(self, state):
        return state.current_location == self.location_id

    def references(self):
        yield "location", self.location_id


@dataclass(frozen=True)
class Visited(Condition):
    location_id: str

    def __call__(self, state):
        return self.location_id in state.visited

    def references(self):
        yield "location", self.location_id


@dataclass(frozen=True)
class AllOf(Condition):
    parts: tuple

    def __call__(self, state):
        return all(part(state) for part in self.parts)

    def references(self):
        for part in self.parts:
            yield from part.references()


@dataclass(frozen=True)
class AnyOf(Condition):
    parts: tuple

    def __call__(self, state):
        return any(part(state) for part in self.parts)

    def references(self):
        for part in self.parts:
            yield from part.references()


@dataclass(frozen=True)
class Not(Condition):
    part: Condition

    def __call__(self, state):
        return not self.part(state)

    def references(self):
        return self.part.references()


def parse_condition(data):
    """
    Builds a Condition from its YAML form.
    Input: {"flag": "openedPortal", "equals": True} or {"all": [...]}
    A bare string is shorthand for a truthy flag check.
    """
    if isinstance(data, Condition):
        return data
    if isinstance(data, str):
        return FlagIs(data)
    if not isinstance(data, dict):
        raise ConfigurationError(f"condition must be a mapping, got {data!r}")

    if "flag" in data:
        if "equals" in data:
            return FlagIs(str(data["flag"]), data["equals"])
        return FlagIs(str(data["flag"]))
    if "has" in data:
        return Has(str(data["has"]))
    if "at" in data:
        return At(str(data["at"]))
    if "visited" in data:
        return Visited(str(data["visited"]))
    if "all" in data:
        return AllOf(tuple(parse_condition(part) for part in _as_list(data["all"])))
    if "any" in data:
        return AnyOf(tuple(parse_condition(part) for part in _as_list(data["any"])))
    if "not" in data:
        return Not(parse_condition(data["not"]))

    raise ConfigurationError(f"unknown condition {data!r}")


def _as_list(value):
    if not isinstance(value, list):
        raise ConfigurationError(f"expected a list of conditions, got {value!r}")
    return value


def condition_references(condition):
    # Plain callables can't be inspected; only expressions are checked at load.
    if isinstance(condition, Condition):
        return condition.references()
    return iter(())
