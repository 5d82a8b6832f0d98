"""
Session State: the mutable, per-player progress record.

A SessionState owns everything a turn may change: where the player is,
what they carry, which locations they have left behind, the flag bag,
and the session's own working copy of item placement. Item placement is
only ever changed through take_item / drop_item / move_item, which keep
every item in at most one place.
"""
import copy
from dataclasses import dataclass, field

from .world import is_scalar

INVENTORY = "@inventory"


@dataclass
class SessionState:
    current_location: str
    inventory: list = field(default_factory=list)
    visited: set = field(default_factory=set)
    flags: dict = field(default_factory=dict)
    placement: dict = field(default_factory=dict)
    item_properties: dict = field(default_factory=dict)
    # locations whose first-visit text the player has already been shown
    first_visits_seen: set = field(default_factory=set)

    # ==========================================================
    # FLAGS
    # ==========================================================
    def flag(self, name, default=None):
        return self.flags.get(name, default)

    def set_flag(self, name, value=True):
        if not is_scalar(value):
            raise TypeError(f"flag '{name}' must be bool, int, float or str, not {type(value).__name__}")
        self.flags[name] = value

    def clear_flag(self, name):
        self.flags.pop(name, None)

    # ==========================================================
    # ITEMS
    # ==========================================================
    def items_at(self, location_id):
        return list(self.placement.get(location_id, []))

    def carries(self, item_id):
        return item_id in self.inventory

    def where(self, item_id):
        """Location id, INVENTORY, or None when the item is off-stage."""
        if item_id in self.inventory:
            return INVENTORY
        for location_id, item_ids in self.placement.items():
            if item_id in item_ids:
                return location_id
        return None

    def move_item(self, item_id, destination):
        """Moves an item to a location, to INVENTORY, or off-stage (None)."""
        if item_id in self.inventory:
            self.inventory.remove(item_id)
        for item_ids in self.placement.values():
            if item_id in item_ids:
                item_ids.remove(item_id)
        if destination == INVENTORY:
            self.inventory.append(item_id)
        elif destination is not None:
            self.placement.setdefault(destination, []).append(item_id)

    def take_item(self, item_id):
        self.move_item(item_id, INVENTORY)

    def drop_item(self, item_id):
        self.move_item(item_id, self.current_location)

    def item_property(self, item_id, key, default=None):
        return self.item_properties.get(item_id, {}).get(key, default)

    def set_item_property(self, item_id, key, value):
        if not is_scalar(value):
            raise TypeError(f"property '{key}' of '{item_id}' must be a scalar, not {type(value).__name__}")
        self.item_properties.setdefault(item_id, {})[key] = value

    # ==========================================================
    # PERSISTENCE
    # ==========================================================
    def copy(self):
        return copy.deepcopy(self)

    def to_dict(self):
        return {
            "current_location": self.current_location,
            "inventory": list(self.inventory),
            "visited": sorted(self.visited),
            "flags": dict(self.flags),
            "placement": {loc: list(ids) for loc, ids in self.placement.items()},
            "item_properties": copy.deepcopy(self.item_properties),
            "first_visits_seen": sorted(self.first_visits_seen),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            current_location=data["current_location"],
            inventory=list(data.get("inventory", [])),
            visited=set(data.get("visited", [])),
            flags=dict(data.get("flags", {})),
            placement={loc: list(ids) for loc, ids in data.get("placement", {}).items()},
            item_properties=copy.deepcopy(data.get("item_properties", {})),
            first_visits_seen=set(data.get("first_visits_seen", [])),
        )


def build_initial_state(world, start, inventory=(), flags=None):
    """Builds a fresh session from the world's declared placement.
    Everything is copied; the world and the arguments are never shared."""
    return SessionState(
        current_location=start,
        inventory=list(inventory),
        visited=set(),
        flags=copy.deepcopy(dict(flags or {})),
        placement={location.id: list(location.items) for location in world.locations.values()},
        item_properties={item.id: dict(item.properties) for item in world.items.values()},
    )
