import json
import unittest

from rulebook import (
    INVENTORY,
    AllOf,
    ConfigurationError,
    Exit,
    FlagIs,
    Has,
    Item,
    Location,
    SessionState,
    World,
    build_initial_state,
    parse_condition,
)
from rulebook.exits import is_visible, resolve, visible_exits


def build_world():
    return World(
        [
            Location("yard", "Yard", items=("bucket",),
                     exits={"North": Exit("barn"), "hatch": Exit("loft", FlagIs("hatchOpen"))}),
            Location("barn", "Barn", exits={"south": Exit("yard")}),
            Location("loft", "Loft"),
        ],
        [Item("bucket", "tin bucket", properties={"full": False})],
    )


class TestWorldValidation(unittest.TestCase):
    def test_consistent_world_loads(self):
        world = build_world()
        self.assertEqual(set(world.locations), {"yard", "barn", "loft"})

    def test_dangling_exit(self):
        with self.assertRaises(ConfigurationError) as ctx:
            World([Location("a", "A", exits={"north": Exit("nowhere")})])
        self.assertIn("unknown location 'nowhere'", str(ctx.exception))

    def test_unknown_item_in_location(self):
        with self.assertRaises(ConfigurationError):
            World([Location("a", "A", items=("ghost",))])

    def test_item_placed_twice(self):
        with self.assertRaises(ConfigurationError):
            World([Location("a", "A", items=("cup",)), Location("b", "B", items=("cup",))],
                  [Item("cup", "cup")])

    def test_non_scalar_property(self):
        with self.assertRaises(ConfigurationError):
            World([Location("a", "A")], [Item("cup", "cup", properties={"contents": ["tea"]})])

    def test_condition_checks_unknown_item(self):
        with self.assertRaises(ConfigurationError):
            World([Location("a", "A", exits={"up": Exit("a", Has("ladder"))})])

    def test_duplicate_location(self):
        with self.assertRaises(ConfigurationError):
            World([Location("a", "A"), Location("a", "Other A")])

    def test_exit_tokens(self):
        self.assertEqual(build_world().exit_tokens(), ["north", "hatch", "south"])


class TestExitResolver(unittest.TestCase):
    def setUp(self):
        self.world = build_world()
        self.state = build_initial_state(self.world, "yard")
        self.yard = self.world.location("yard")

    def test_static_exit_is_visible(self):
        self.assertTrue(is_visible(Exit("barn"), self.state))
        self.assertEqual(resolve(self.yard, "north", self.state).target, "barn")

    def test_conditional_exit_follows_flag(self):
        self.assertIsNone(resolve(self.yard, "hatch", self.state))
        self.assertEqual([token for token, _ in visible_exits(self.yard, self.state)], ["North"])
        self.state.set_flag("hatchOpen")
        self.assertEqual(resolve(self.yard, "HATCH", self.state).target, "loft")
        self.assertEqual([token for token, _ in visible_exits(self.yard, self.state)], ["North", "hatch"])

    def test_plain_callable_condition(self):
        exit_ = Exit("loft", lambda state: state.carries("bucket"))
        self.assertFalse(is_visible(exit_, self.state))
        self.state.take_item("bucket")
        self.assertTrue(is_visible(exit_, self.state))

    def test_absent_direction(self):
        self.assertIsNone(resolve(self.yard, "west", self.state))


class TestConditions(unittest.TestCase):
    def test_parse_and_evaluate(self):
        condition = parse_condition({"all": [{"flag": "lit"}, {"not": {"has": "bucket"}}, {"at": "yard"}]})
        self.assertIsInstance(condition, AllOf)
        state = SessionState("yard", flags={"lit": True})
        self.assertTrue(condition(state))
        state.inventory.append("bucket")
        self.assertFalse(condition(state))

    def test_flag_equality(self):
        condition = parse_condition({"flag": "door", "equals": "open"})
        self.assertFalse(condition(SessionState("yard", flags={"door": "shut"})))
        self.assertTrue(condition(SessionState("yard", flags={"door": "open"})))

    def test_any_and_visited(self):
        condition = parse_condition({"any": [{"visited": "barn"}, "cheat"]})
        self.assertFalse(condition(SessionState("yard")))
        self.assertTrue(condition(SessionState("yard", visited={"barn"})))
        self.assertTrue(condition(SessionState("yard", flags={"cheat": True})))

    def test_references(self):
        condition = parse_condition({"all": [{"has": "bucket"}, {"visited": "barn"}]})
        self.assertEqual(list(condition.references()), [("item", "bucket"), ("location", "barn")])

    def test_unknown_condition(self):
        with self.assertRaises(ConfigurationError):
            parse_condition({"weather": "rain"})
        with self.assertRaises(ConfigurationError):
            parse_condition(42)


class TestSessionState(unittest.TestCase):
    def setUp(self):
        self.world = build_world()
        self.state = build_initial_state(self.world, "yard", flags={"hatchOpen": False})

    def test_initial_state_copies_template(self):
        self.state.take_item("bucket")
        self.state.set_item_property("bucket", "full", True)
        self.assertEqual(self.world.location("yard").items, ("bucket",))
        self.assertEqual(self.world.item("bucket").properties, {"full": False})
        fresh = build_initial_state(self.world, "yard")
        self.assertEqual(fresh.items_at("yard"), ["bucket"])

    def test_move_item_keeps_single_place(self):
        self.assertEqual(self.state.where("bucket"), "yard")
        self.state.move_item("bucket", "barn")
        self.assertEqual(self.state.where("bucket"), "barn")
        self.state.move_item("bucket", INVENTORY)
        self.assertEqual(self.state.where("bucket"), INVENTORY)
        self.assertEqual(self.state.items_at("barn"), [])
        self.state.move_item("bucket", None)
        self.assertIsNone(self.state.where("bucket"))
        self.assertEqual(self.state.inventory, [])

    def test_flags_are_scalar(self):
        self.state.set_flag("count", 3)
        self.assertEqual(self.state.flag("count"), 3)
        with self.assertRaises(TypeError):
            self.state.set_flag("bag", {"a": 1})
        with self.assertRaises(TypeError):
            self.state.set_item_property("bucket", "contents", ["water"])

    def test_round_trip_through_json(self):
        self.state.take_item("bucket")
        self.state.visited.add("barn")
        self.state.set_flag("hatchOpen", True)
        restored = SessionState.from_dict(json.loads(json.dumps(self.state.to_dict())))
        self.assertEqual(restored, self.state)


if __name__ == '__main__':
    unittest.main()
