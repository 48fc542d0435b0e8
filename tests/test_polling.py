import time
import unittest
from unittest import mock

from safetykit.errors import AnalysisTimeoutError
from safetykit.polling import PollPolicy


class TestPollPolicy(unittest.TestCase):
    def test_returns_first_result(self):
        answers = iter([None, None, "done"])
        attempt = mock.Mock(side_effect=lambda: next(answers))
        result = PollPolicy(max_attempts=5, interval=0).run(attempt)
        self.assertEqual(result, "done")
        self.assertEqual(attempt.call_count, 3)

    def test_exhaustion(self):
        attempt = mock.Mock(return_value=None)
        with self.assertRaises(AnalysisTimeoutError) as ctx:
            PollPolicy(max_attempts=3, interval=0).run(attempt)
        self.assertEqual(attempt.call_count, 3)
        self.assertIn("took too long", str(ctx.exception))

    def test_no_wait_after_last_attempt(self):
        policy = PollPolicy(max_attempts=3, interval=5)
        policy.cancel_event = mock.Mock()
        policy.cancel_event.is_set.return_value = False
        policy.cancel_event.wait.return_value = False

        with self.assertRaises(AnalysisTimeoutError):
            policy.run(lambda: None)
        self.assertEqual(policy.cancel_event.wait.call_count, 2)
        policy.cancel_event.wait.assert_called_with(5)

    def test_cancel_before_start(self):
        policy = PollPolicy(max_attempts=3, interval=0)
        policy.cancel()
        attempt = mock.Mock(return_value=None)
        with self.assertRaises(AnalysisTimeoutError):
            policy.run(attempt)
        attempt.assert_not_called()

    def test_cancel_interrupts_wait(self):
        policy = PollPolicy(max_attempts=3, interval=30)

        def attempt():
            policy.cancel()
            return None

        started = time.monotonic()
        with self.assertRaises(AnalysisTimeoutError) as ctx:
            policy.run(attempt)
        self.assertIn("cancelled", str(ctx.exception))
        self.assertLess(time.monotonic() - started, 5)


if __name__ == "__main__":
    unittest.main()
