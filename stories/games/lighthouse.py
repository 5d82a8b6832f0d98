"""
The Last Light: a story authored directly in Python.

Custom rules are plain functions registered on a Rulebook ahead of the
standard rules, so they get the first look at every input.
"""
from rulebook import Exit, Game, Item, Location, Rulebook, World, standard_rules
from rulebook.formatter import describe_location

TITLE = "The Last Light"
WIN_FLAG = "lampLit"

ITEMS = [
    Item("bread", "heel of bread", "Stale, but it would keep a gull busy."),
    Item("key", "iron key", "Stamped with a tiny lighthouse."),
    Item("oil", "can of oil", "Lamp oil. Still sloshing."),
    Item("keeper", "old keeper", "He watches the sea more than he watches you.", portable=False),
    Item("lamp", "great lamp", "A wick as thick as your wrist, dry as bone.", portable=False),
]

LOCATIONS = [
    Location(
        "shore", "Pebble Shore",
        "Waves drag at the pebbles. A path climbs north to the cliff; a hut sits to the east.",
        items=("bread",),
        exits={"north": Exit("cliff"), "east": Exit("hut")},
        first_visit="The lighthouse above you is dark. It should not be dark.",
    ),
    Location(
        "hut", "Keeper's Hut",
        "One chair, one stove, one man.",
        items=("keeper",),
        exits={"west": Exit("shore")},
    ),
    Location(
        "cliff", "Cliff Top",
        "Gulls wheel around the lighthouse door.",
        exits={"south": Exit("shore"), "in": Exit("stairs")},
    ),
    Location(
        "stairs", "Spiral Stairs",
        "The stairs wind up into the dark. A door bars the top.",
        exits={
            "out": Exit("cliff"),
            "up": Exit("lamp_room", lambda state: bool(state.flag("doorUnlocked"))),
        },
    ),
    Location(
        "lamp_room", "Lamp Room",
        "Glass on every side, and the sea beyond it.",
        items=("lamp",),
        exits={"down": Exit("stairs")},
    ),
]


def build_rulebook():
    rules = Rulebook()

    # The gull strikes whatever the player types while they carry bread on
    # the cliff; it re-checks its trigger on every turn like any other rule.
    @rules.when(r".*", name="gull")
    def gull(match, state, world):
        if state.current_location != "cliff" or not state.carries("bread"):
            return None
        state.move_item("bread", None)
        state.set_flag("gullFed")
        return "A gull drops out of the sky, snatches your bread and is gone."

    @rules.when(r"(?:talk|speak)(?: to| with)? (?:the )?(?:old )?keeper", name="talk to keeper")
    def talk(match, state, world):
        if state.current_location != "hut":
            return None
        if state.flag("metKeeper"):
            return '"Go on, then. The light won\'t light itself."'
        state.set_flag("metKeeper")
        state.take_item("key")
        return (
            '"My knees gave out on those stairs years ago." '
            "He presses an iron key into your hand."
        )

    @rules.when(r"unlock (?:the )?door(?: with (?:the )?(?:iron )?key)?", name="unlock door")
    def unlock(match, state, world):
        if state.current_location != "stairs":
            return None
        if state.flag("doorUnlocked"):
            return "It's already unlocked."
        if not state.carries("key"):
            return "You have nothing to unlock it with."
        state.set_flag("doorUnlocked")
        return "The lock gives with a shriek of rust.\n" + describe_location(world, state)

    @rules.when(r"(?:light|fill) (?:the )?(?:great )?lamp", name="light lamp")
    def light(match, state, world):
        if state.current_location != "lamp_room":
            return None
        if state.flag(WIN_FLAG):
            return "The lamp is already blazing."
        if not state.carries("oil"):
            return "The wick is dry. It needs oil."
        state.move_item("oil", None)
        state.set_flag(WIN_FLAG)
        return "You pour the oil and strike a match. Light sweeps across the water."

    rules.extend(standard_rules())
    return rules


def build_game():
    return Game(
        World(LOCATIONS, ITEMS),
        build_rulebook(),
        start="shore",
        inventory=["oil"],
        title=TITLE,
    )
