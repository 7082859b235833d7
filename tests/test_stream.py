"""
Test cases for the synchronous publish/subscribe channel.
"""
import unittest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from handcontrol.source_mock import MockFrameSource, make_frame
from handcontrol.stream import Channel
from handcontrol.types import FrameSource


class TestChannel(unittest.TestCase):
    """Test delivery order and subscription handling."""

    def setUp(self):
        self.channel = Channel(initial=0)

    def test_initial_value(self):
        self.assertEqual(self.channel.value, 0)
        self.assertIsNone(Channel().value)

    def test_delivery_order(self):
        """Test that every subscriber gets every value, in publish order."""
        first, second = [], []
        self.channel.subscribe(first.append)
        self.channel.subscribe(second.append)

        for value in (1, 2, 3):
            self.channel.publish(value)

        self.assertEqual(first, [1, 2, 3])
        self.assertEqual(second, [1, 2, 3])
        self.assertEqual(self.channel.value, 3)

    def test_subscribers_called_in_registration_order(self):
        calls = []
        self.channel.subscribe(lambda v: calls.append("a"))
        self.channel.subscribe(lambda v: calls.append("b"))
        self.channel.publish(1)
        self.assertEqual(calls, ["a", "b"])

    def test_unsubscribe(self):
        received = []
        subscription = self.channel.subscribe(received.append)
        self.channel.publish(1)
        subscription.unsubscribe()
        self.channel.publish(2)

        self.assertEqual(received, [1])
        self.assertFalse(subscription.active)
        self.assertEqual(self.channel.subscriber_count, 0)

    def test_double_unsubscribe(self):
        subscription = self.channel.subscribe(lambda v: None)
        subscription.unsubscribe()
        subscription.unsubscribe()
        self.assertEqual(self.channel.subscriber_count, 0)

    def test_unsubscribe_during_publish(self):
        """Test that a callback may detach itself while being notified."""
        received = []
        holder = {}

        def once(value):
            received.append(value)
            holder["sub"].unsubscribe()

        holder["sub"] = self.channel.subscribe(once)
        other = []
        self.channel.subscribe(other.append)

        self.channel.publish(1)
        self.channel.publish(2)

        self.assertEqual(received, [1])
        self.assertEqual(other, [1, 2])

    def test_subscriber_errors_propagate(self):
        def broken(value):
            raise RuntimeError("boom")

        self.channel.subscribe(broken)
        with self.assertRaises(RuntimeError):
            self.channel.publish(1)


class TestMockFrameSource(unittest.TestCase):
    """Test the in-memory frame source."""

    def test_is_frame_source(self):
        self.assertIsInstance(MockFrameSource(), FrameSource)

    def test_push_and_counters(self):
        source = MockFrameSource()
        frames = []
        source.subscribe(frames.append)

        source.push_all([make_frame(timestamp=1000), make_frame(timestamp=1033)])
        self.assertEqual([f.timestamp for f in frames], [1000, 1033])
        self.assertEqual(source.push_count, 2)

        source.reset_counters()
        self.assertEqual(source.push_count, 0)


if __name__ == '__main__':
    unittest.main()
