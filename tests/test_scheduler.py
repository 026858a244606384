"""
Unit tests for schedulers
"""

import asyncio
import unittest

from memory_match.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler(unittest.TestCase):
    """Test ManualScheduler functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.scheduler = ManualScheduler()
        self.calls = []

    def test_call_later_fires_when_due(self):
        """Test one-shot task fires only after its delay."""
        self.scheduler.call_later(1.0, lambda: self.calls.append("a"))

        self.scheduler.advance(0.9)
        self.assertEqual(self.calls, [])

        self.scheduler.advance(0.1)
        self.assertEqual(self.calls, ["a"])

        self.scheduler.advance(5)
        self.assertEqual(self.calls, ["a"])

    def test_tasks_fire_in_due_order(self):
        """Test tasks fire by due time, then by scheduling order."""
        self.scheduler.call_later(1.0, lambda: self.calls.append("late"))
        self.scheduler.call_later(0.5, lambda: self.calls.append("early"))
        self.scheduler.call_later(1.0, lambda: self.calls.append("late2"))

        self.scheduler.advance(2)
        self.assertEqual(self.calls, ["early", "late", "late2"])

    def test_cancel(self):
        """Test cancelled tasks never fire."""
        task = self.scheduler.call_later(1.0, lambda: self.calls.append("x"))
        task.cancel()
        task.cancel()

        self.assertEqual(self.scheduler.advance(2), 0)
        self.assertEqual(self.calls, [])
        self.assertFalse(task.active)

    def test_call_every(self):
        """Test repeating task fires once per interval."""
        task = self.scheduler.call_every(1.0, lambda: self.calls.append(self.scheduler.now))

        self.scheduler.advance(3.5)
        self.assertEqual(self.calls, [1.0, 2.0, 3.0])
        self.assertEqual(task.fired, 3)

        task.cancel()
        self.scheduler.advance(3)
        self.assertEqual(len(self.calls), 3)

    def test_repeating_task_can_cancel_itself(self):
        """Test a repeating callback may cancel its own task."""
        holder = {}

        def callback():
            self.calls.append(1)
            holder['task'].cancel()

        holder['task'] = self.scheduler.call_every(1.0, callback)
        self.scheduler.advance(5)
        self.assertEqual(self.calls, [1])

    def test_callback_can_schedule(self):
        """Test callbacks may schedule new tasks that fire in the same advance."""
        self.scheduler.call_later(
            1.0, lambda: self.scheduler.call_later(0.5, lambda: self.calls.append("nested"))
        )
        self.scheduler.advance(2)
        self.assertEqual(self.calls, ["nested"])

    def test_pending(self):
        """Test pending lists only live tasks."""
        keep = self.scheduler.call_later(1.0, lambda: None)
        drop = self.scheduler.call_later(1.0, lambda: None)
        drop.cancel()
        self.assertEqual(self.scheduler.pending(), [keep])

    def test_invalid_interval(self):
        """Test zero interval is rejected."""
        with self.assertRaises(ValueError):
            self.scheduler.call_every(0, lambda: None)


class TestAsyncioScheduler(unittest.TestCase):
    """Test AsyncioScheduler on a real event loop."""

    def test_call_later_and_cancel(self):
        """Test one-shot task fires and cancelled task does not."""
        calls = []

        async def scenario():
            scheduler = AsyncioScheduler()
            scheduler.call_later(0.01, lambda: calls.append("fired"))
            cancelled = scheduler.call_later(0.01, lambda: calls.append("cancelled"))
            cancelled.cancel()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        self.assertEqual(calls, ["fired"])

    def test_call_every(self):
        """Test repeating task keeps firing until cancelled."""
        calls = []

        async def scenario():
            scheduler = AsyncioScheduler()
            task = scheduler.call_every(0.01, lambda: calls.append(1))
            await asyncio.sleep(0.1)
            task.cancel()
            count = len(calls)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(scenario())
        self.assertGreaterEqual(count, 3)
        self.assertEqual(len(calls), count)

    def test_failing_callback_is_contained(self):
        """Test a raising callback does not stop a repeating task."""
        calls = []

        def callback():
            calls.append(1)
            raise RuntimeError("boom")

        async def scenario():
            scheduler = AsyncioScheduler()
            task = scheduler.call_every(0.01, callback)
            await asyncio.sleep(0.08)
            task.cancel()

        asyncio.run(scenario())
        self.assertGreaterEqual(len(calls), 2)


if __name__ == '__main__':
    unittest.main()
