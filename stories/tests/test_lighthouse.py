import unittest
import sys
import os

# Ensure the 'stories/games' directory is in the path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../games')))

from lighthouse import WIN_FLAG, build_game


class TestLighthouseStory(unittest.TestCase):
    def setUp(self):
        self.game = build_game()
        self.state = self.game.new_session()

    def say(self, cmd):
        result = self.game.process_command(self.state, cmd)
        self.state = result.state
        print(f"> {cmd}\n{result.text}")
        return result.text

    def test_story(self):
        print(f"\nTesting Story: {self.game.title}")
        self.say('take bread')
        self.say('north')
        self.assertEqual(self.say('in'), "A gull drops out of the sky, snatches your bread and is gone.")
        self.assertEqual(self.state.current_location, 'cliff')
        self.assertIsNone(self.state.where('bread'))

        self.say('in')
        self.assertEqual(self.say('up'), "You can't go that way.")

        for cmd in ['out', 'south', 'east']:
            self.say(cmd)
        first = self.say('talk to keeper')
        self.assertIn("iron key", first)
        self.assertEqual(self.say('talk to the old keeper'), '"Go on, then. The light won\'t light itself."')
        self.assertEqual(self.state.inventory, ['oil', 'key'])

        for cmd in ['west', 'north', 'in']:
            self.say(cmd)
        self.assertIn("Exits: out, up.", self.say('unlock door with key'))
        self.say('up')
        self.assertEqual(self.say('light lamp'), "You pour the oil and strike a match. Light sweeps across the water.")

        # win condition
        self.assertEqual(self.state.current_location, 'lamp_room')
        self.assertTrue(self.state.flag(WIN_FLAG))

    def test_keeper_only_talks_in_hut(self):
        self.assertEqual(self.say('talk to keeper'), "I don't understand that.")
        self.assertIsNone(self.state.flag("metKeeper"))

    def test_unlock_without_key(self):
        for cmd in ['north', 'in']:
            self.say(cmd)
        self.assertEqual(self.say('unlock door'), "You have nothing to unlock it with.")
        self.assertEqual(self.say('up'), "You can't go that way.")


if __name__ == '__main__':
    unittest.main()
