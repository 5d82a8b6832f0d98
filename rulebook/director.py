"""
The Director is the state machine.

It does not write prose; rules do. For each input it walks the rules in
registration order and stops at the first one that claims the input.
Whatever that rule changed stays changed; later rules never run.
"""
import logging
from dataclasses import dataclass

from .errors import ConfigurationError
from .rules import arrive, standard_rules
from .state import SessionState, build_initial_state
from .world import is_scalar

logger = logging.getLogger(__name__)

FALLBACK = "I don't understand that."


@dataclass
class TurnResult:
    text: str
    state: SessionState


class Director:
    def __init__(self, world, rules, fallback=FALLBACK):
        self.world = world
        self.rules = tuple(rules)
        self.fallback = fallback

    def dispatch(self, text, state):
        """
        Runs one input against the rules, mutating `state` in place.
        Returns (response, state). Exactly one rule, or none, fires.
        """
        for rule in self.rules:
            response = rule.try_handle(text, state, self.world)
            if response is not None:
                logger.debug("Rule '%s' claimed %r", rule.name, text)
                return response, state

        logger.debug("No rule claimed %r", text)
        return self.fallback, state


class Game:
    """
    A validated game definition: world, ordered rules and the declared
    initial state. Building one either succeeds completely or raises
    ConfigurationError; there is no partially loaded game.
    """

    def __init__(self, world, rules=None, *, start, inventory=(), flags=None,
                 title="Untitled", intro="", fallback=FALLBACK):
        self.world = world
        self.title = title
        self.intro = intro
        self.director = Director(world, standard_rules() if rules is None else rules, fallback)
        self.initial_state = build_initial_state(world, start, inventory, flags)
        self._validate()
        logger.debug("Game '%s' ready with %d rules", title, len(self.rules))

    @property
    def rules(self):
        return self.director.rules

    def _validate(self):
        problems = []
        world = self.world
        initial = self.initial_state

        if initial.current_location not in world.locations:
            problems.append(f"initial location '{initial.current_location}' does not exist")
        for item_id in initial.inventory:
            if item_id not in world.items:
                problems.append(f"initial inventory holds unknown item '{item_id}'")
            elif any(item_id in location.items for location in world.locations.values()):
                problems.append(f"item '{item_id}' is both carried and placed in a location")
        if len(set(initial.inventory)) != len(initial.inventory):
            problems.append("initial inventory lists an item twice")
        for name, value in initial.flags.items():
            if not is_scalar(value):
                problems.append(f"initial flag '{name}' must be a scalar")

        seen = set()
        for rule in self.rules:
            if rule.name in seen:
                problems.append(f"duplicate rule name '{rule.name}'")
            seen.add(rule.name)
            for kind, ref in rule.references:
                known = world.items if kind == "item" else world.locations
                if ref not in known:
                    problems.append(f"rule '{rule.name}' refers to unknown {kind} '{ref}'")

        if problems:
            for problem in problems:
                logger.error("Invalid game definition: %s", problem)
            raise ConfigurationError(problems)

    def new_session(self):
        return self.initial_state.copy()

    def begin(self):
        """
        A fresh session plus its opening description. The start location's
        first-visit text is shown here and not again.
        """
        state = self.new_session()
        return TurnResult(arrive(self.world, state), state)

    def process_command(self, state, text):
        """
        One turn. The caller's state is left as it was; the returned
        TurnResult carries the updated copy.
        """
        working = state.copy()
        response, working = self.director.dispatch(text, working)
        return TurnResult(response, working)
