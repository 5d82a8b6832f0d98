"""
Response Formatter.

Pure functions of (World, SessionState) that turn the current situation
into text. Nothing here writes to the state.
"""
from .exits import visible_exits


def item_names(world, item_ids):
    return [world.items[item_id].name for item_id in item_ids if item_id in world.items]


def describe_items(world, state, location_id):
    names = item_names(world, state.items_at(location_id))
    if not names:
        return None
    return "You see: " + ", ".join(names) + "."


def describe_exits(world, state, location_id):
    location = world.location(location_id)
    tokens = [token for token, _ in visible_exits(location, state)]
    if not tokens:
        return None
    return "Exits: " + ", ".join(tokens) + "."


def first_visit_pending(state, location_id):
    return location_id not in state.visited and location_id not in state.first_visits_seen


def describe_location(world, state, location_id=None):
    """Name, description, first-visit text, items present and visible exits."""
    location_id = location_id or state.current_location
    location = world.location(location_id)

    parts = [location.name]
    if location.description:
        parts.append(location.description)
    if location.first_visit and first_visit_pending(state, location_id):
        parts.append(location.first_visit)
    for line in (describe_items(world, state, location_id), describe_exits(world, state, location_id)):
        if line:
            parts.append(line)
    return "\n".join(parts)


def describe_inventory(world, state):
    names = item_names(world, state.inventory)
    if not names:
        return "You are carrying nothing."
    return "You are carrying: " + ", ".join(names) + "."
