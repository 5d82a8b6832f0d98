"""
Builds a Game from its YAML authoring format.

The loader checks the shape of each value and translates it; every
cross-reference check happens when the World and Game are constructed.
Either way a bad story file fails with a ConfigurationError, never with
whatever Python raised on the way.
"""
import logging
import re
from pathlib import Path

import yaml

from .conditions import parse_condition
from .director import FALLBACK, Game
from .errors import ConfigurationError
from .rules import BUILTINS, EFFECT_KINDS, Effect, scripted_rule, standard_rules
from .state import INVENTORY
from .world import Exit, Item, Location, World, is_scalar

logger = logging.getLogger(__name__)


def load_game_file(path):
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read story file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"story file {path} is not valid YAML: {exc}") from exc

    logger.debug("Loaded story file: %s", path)
    return load_game(data)


def load_game(data):
    if not isinstance(data, dict):
        raise ConfigurationError("a story must be a mapping at the top level")
    if "start" not in data:
        raise ConfigurationError("a story needs a 'start' location")

    items = [_load_item(cfg) for cfg in _sequence(data.get("items"), "items")]
    locations = [_load_location(cfg) for cfg in _sequence(data.get("locations"), "locations")]
    world = World(locations, items)

    game = Game(
        world,
        _load_rules(_sequence(data.get("rules"), "rules")),
        start=_text(data["start"], "start"),
        inventory=[_text(item_id, "inventory entry") for item_id in _sequence(data.get("inventory"), "inventory")],
        flags=dict(_mapping(data.get("flags"), "flags")),
        title=_text(data.get("title", "Untitled"), "title"),
        intro=_text(data.get("intro", ""), "intro"),
        fallback=_text(data.get("fallback", FALLBACK), "fallback"),
    )
    logger.info("Story '%s': %d locations, %d items, %d rules",
                game.title, len(world.locations), len(world.items), len(game.rules))
    return game


# ==========================================================
# SHAPE CHECKS
# ==========================================================
def _mapping(value, what):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _sequence(value, what):
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _text(value, what):
    """Scalars become strings; lists, mappings and nulls are rejected."""
    if not is_scalar(value):
        raise ConfigurationError(f"{what} must be text, got {type(value).__name__}")
    return str(value)


def _require_id(cfg, kind):
    if not isinstance(cfg, dict) or "id" not in cfg:
        raise ConfigurationError(f"every {kind} needs an 'id': {cfg!r}")
    return _text(cfg["id"], f"{kind} id")


# ==========================================================
# WORLD
# ==========================================================
def _load_item(cfg):
    item_id = _require_id(cfg, "item")
    where = f"item '{item_id}'"
    return Item(
        id=item_id,
        name=_text(cfg.get("name", item_id), f"name of {where}"),
        description=_text(cfg.get("description", ""), f"description of {where}"),
        portable=bool(cfg.get("portable", True)),
        properties=dict(_mapping(cfg.get("properties"), f"properties of {where}")),
        take_flags=dict(_mapping(cfg.get("take_flags"), f"take_flags of {where}")),
    )


def _load_exit(info, where):
    if isinstance(info, str):
        return Exit(info)
    if not isinstance(info, dict) or "target" not in info:
        raise ConfigurationError(f"{where} needs a 'target': {info!r}")
    condition = parse_condition(info["when"]) if "when" in info else None
    return Exit(_text(info["target"], f"target of {where}"), condition)


def _load_location(cfg):
    location_id = _require_id(cfg, "location")
    where = f"location '{location_id}'"
    exits = {
        str(direction): _load_exit(info, f"exit '{direction}' of {where}")
        for direction, info in _mapping(cfg.get("exits"), f"exits of {where}").items()
    }
    return Location(
        id=location_id,
        name=_text(cfg.get("name", location_id), f"name of {where}"),
        description=_text(cfg.get("description", ""), f"description of {where}"),
        items=tuple(_text(item_id, f"item of {where}") for item_id in _sequence(cfg.get("items"), f"items of {where}")),
        exits=exits,
        first_visit=_text(cfg.get("first_visit", ""), f"first_visit of {where}"),
    )


# ==========================================================
# RULES
# ==========================================================
def _load_effect(cfg):
    """
    Input: {"set": "openedPortal"} or {"set": {"openedPortal": True}}
           {"move_item": {"item": "key", "to": "hall"}}
    One YAML entry may expand to several effects.
    """
    if not isinstance(cfg, dict) or len(cfg) != 1:
        raise ConfigurationError(f"an effect must be a single-key mapping: {cfg!r}")
    kind, value = next(iter(cfg.items()))
    if kind not in EFFECT_KINDS:
        raise ConfigurationError(f"unknown effect '{kind}'")

    if kind == "set" and isinstance(value, dict):
        for flag, flag_value in value.items():
            if not is_scalar(flag_value):
                raise ConfigurationError(f"flag '{flag}' must be set to a scalar, got {flag_value!r}")
        return [Effect("set", str(flag), flag_value) for flag, flag_value in value.items()]
    if kind == "move_item":
        if not isinstance(value, dict) or "item" not in value:
            raise ConfigurationError(f"move_item needs an 'item': {value!r}")
        destination = value.get("to")
        if destination == "inventory":
            destination = INVENTORY
        elif destination is not None:
            destination = _text(destination, "move_item destination")
        return [Effect("move_item", _text(value["item"], "move_item item"), destination)]
    return [Effect(kind, _text(value, f"{kind} effect"))]


def _load_scripted(cfg):
    if "name" not in cfg or "pattern" not in cfg:
        raise ConfigurationError(f"a rule needs a 'name' and a 'pattern': {cfg!r}")
    name = _text(cfg["name"], "rule name")
    effects = []
    for effect_cfg in _sequence(cfg.get("effects"), f"effects of rule '{name}'"):
        effects.extend(_load_effect(effect_cfg))
    otherwise = cfg.get("otherwise")
    try:
        return scripted_rule(
            name,
            _text(cfg["pattern"], f"pattern of rule '{name}'"),
            _text(cfg.get("message", ""), f"message of rule '{name}'"),
            at=_text(cfg["at"], f"location of rule '{name}'") if "at" in cfg else None,
            when=parse_condition(cfg["when"]) if "when" in cfg else None,
            effects=effects,
            otherwise=None if otherwise is None else _text(otherwise, f"otherwise of rule '{name}'"),
            describe=bool(cfg.get("describe", False)),
        )
    except re.error as exc:
        raise ConfigurationError(f"rule '{name}' has a bad pattern: {exc}") from exc


def _load_rules(entries):
    """
    Custom rules in file order. {builtin: name} entries place a standard
    rule; a story that places none gets all of them after its own rules.
    """
    rules = []
    placed_builtin = False
    for cfg in entries:
        if not isinstance(cfg, dict):
            raise ConfigurationError(f"a rule must be a mapping: {cfg!r}")
        if "builtin" in cfg:
            name = cfg["builtin"]
            if name == "standard":
                rules.extend(standard_rules())
            elif name in BUILTINS:
                rules.append(BUILTINS[name]())
            else:
                raise ConfigurationError(f"unknown builtin rule '{name}'")
            placed_builtin = True
        else:
            rules.append(_load_scripted(cfg))

    if not placed_builtin:
        rules.extend(standard_rules())
    return rules
