import json
import os
import tempfile
import unittest

from rulebook import SaveFileError, load_game_file
from rulebook.cli import UNDO_DEPTH, load_session, remember, save_path, save_session

STORY_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "stories", "yaml", "portal.yaml")


class TestSaveFiles(unittest.TestCase):
    def setUp(self):
        self.game = load_game_file(STORY_PATH)
        self.tmp = tempfile.TemporaryDirectory()
        self.config = {"save_dir": os.path.join(self.tmp.name, "saves")}

    def tearDown(self):
        self.tmp.cleanup()

    def play(self, commands):
        state = self.game.new_session()
        for cmd in commands:
            state = self.game.process_command(state, cmd).state
        return state

    def test_save_then_load(self):
        state = self.play(["take key", "east", "take lantern", "examine note"])
        path = save_path(self.config, "portal")
        save_session(path, state)

        self.assertTrue(os.path.exists(path))
        loaded = load_session(path, self.game)
        self.assertEqual(loaded, state)
        self.assertEqual(loaded.current_location, "study")
        self.assertTrue(loaded.flag("hasLight"))
        self.assertTrue(loaded.item_property("note", "examined"))

    def test_missing_save(self):
        with self.assertRaises(SaveFileError):
            load_session(save_path(self.config, "portal"), self.game)

    def test_save_in_unknown_location(self):
        state = self.game.new_session()
        state.current_location = "atlantis"
        path = save_path(self.config, "portal")
        save_session(path, state)
        with self.assertRaises(SaveFileError) as ctx:
            load_session(path, self.game)
        self.assertIn("atlantis", str(ctx.exception))

    def test_corrupt_save(self):
        path = save_path(self.config, "portal")
        os.makedirs(os.path.dirname(path))
        with open(path, "w") as f:
            f.write("{not json")
        with self.assertRaises(SaveFileError):
            load_session(path, self.game)

    def test_save_file_is_plain_json(self):
        path = save_path(self.config, "portal")
        save_session(path, self.play(["north"]))
        with open(path) as f:
            data = json.load(f)
        self.assertEqual(data["current_location"], "gallery")
        self.assertEqual(data["visited"], ["entrance"])


class TestUndoHistory(unittest.TestCase):
    def test_keeps_only_newest_states(self):
        history = []
        for turn in range(UNDO_DEPTH + 5):
            remember(history, turn)
        self.assertEqual(len(history), UNDO_DEPTH)
        self.assertEqual(history[0], 5)
        self.assertEqual(history[-1], UNDO_DEPTH + 4)

    def test_short_history_is_untouched(self):
        history = remember(remember([], "a"), "b")
        self.assertEqual(history, ["a", "b"])

    def test_undo_restores_previous_state(self):
        game = load_game_file(STORY_PATH)
        history = []
        state = game.new_session()
        for cmd in ["take key", "north"]:
            result = game.process_command(state, cmd)
            remember(history, state)
            state = result.state

        state = history.pop()
        self.assertEqual(state.current_location, "entrance")
        self.assertIn("key", state.inventory)


if __name__ == '__main__':
    unittest.main()
