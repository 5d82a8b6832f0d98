"""
Exit Resolver.

Movement and the Formatter both ask this module which exits exist, so an
exit the player can walk through is always the same set as the exits
listed in a location description.
"""


def is_visible(exit_, state):
    # Conditions are read-only by contract; nothing here guards against a
    # predicate that mutates the state it is handed.
    if exit_.condition is None:
        return True
    return bool(exit_.condition(state))


def resolve(location, direction, state):
    """The usable exit in `direction`, or None when absent or hidden."""
    direction = direction.strip().lower()
    for token, exit_ in location.exits.items():
        if token.lower() == direction:
            return exit_ if is_visible(exit_, state) else None
    return None


def visible_exits(location, state):
    return [(token, exit_) for token, exit_ in location.exits.items() if is_visible(exit_, state)]
