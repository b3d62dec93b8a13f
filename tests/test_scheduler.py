"""Tests for periodic execution."""

import signal
from unittest.mock import MagicMock, patch

from crawl_distiller.pipeline import PeriodicRunner


class TestRunOnce:
    """Tests for PeriodicRunner.run_once."""

    def test_success(self):
        """A completing task returns True."""
        task = MagicMock()
        runner = PeriodicRunner(task)

        assert runner.run_once() is True
        task.assert_called_once()

    def test_failure_is_logged_not_raised(self, caplog):
        """A failing task is logged and reported as False."""
        task = MagicMock(side_effect=RuntimeError("bucket unreachable"))
        runner = PeriodicRunner(task)

        assert runner.run_once() is False
        assert runner.failures == 1
        assert "bucket unreachable" in caplog.text


class TestRunForever:
    """Tests for PeriodicRunner.run_forever."""

    @patch("crawl_distiller.pipeline.scheduler.sleep")
    def test_runs_immediately_then_on_interval(self, mock_sleep):
        """The first run happens without waiting."""
        task = MagicMock()
        runner = PeriodicRunner(task, interval_minutes=1, max_runs=1)

        runner.run_forever()

        task.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("crawl_distiller.pipeline.scheduler.monotonic")
    @patch("crawl_distiller.pipeline.scheduler.sleep")
    def test_waits_between_runs(self, mock_sleep, mock_monotonic):
        """Runs are separated by the interval."""
        clock = {"now": 0.0}
        mock_monotonic.side_effect = lambda: clock["now"]
        mock_sleep.side_effect = lambda seconds: clock.update(now=clock["now"] + seconds)
        task = MagicMock()
        runner = PeriodicRunner(task, interval_minutes=1, max_runs=3, poll_interval=30)

        runner.run_forever()

        assert task.call_count == 3
        assert sum(call.args[0] for call in mock_sleep.call_args_list) == 120

    @patch("crawl_distiller.pipeline.scheduler.sleep")
    def test_failed_run_does_not_stop_schedule(self, mock_sleep):
        """A failing run is followed by the next one."""
        task = MagicMock(side_effect=[RuntimeError("boom"), None])
        runner = PeriodicRunner(task, interval_minutes=0, max_runs=2)

        runner.run_forever()

        assert task.call_count == 2
        assert runner.failures == 1

    @patch("crawl_distiller.pipeline.scheduler.sleep")
    def test_shutdown_signal_stops_after_current_run(self, mock_sleep):
        """A shutdown request during a run ends the schedule after it."""
        runner = None

        def task():
            runner._handle_shutdown(signal.SIGTERM, None)

        runner = PeriodicRunner(task, interval_minutes=60)

        runner.run_forever()

        assert runner.runs == 1
        assert runner.shutdown_requested is True
        mock_sleep.assert_not_called()

    @patch("crawl_distiller.pipeline.scheduler.sleep")
    def test_restores_signal_handlers(self, mock_sleep):
        """Previous signal handlers are reinstated on exit."""
        before = signal.getsignal(signal.SIGTERM)
        runner = PeriodicRunner(MagicMock(), max_runs=1)

        runner.run_forever()

        assert signal.getsignal(signal.SIGTERM) == before
