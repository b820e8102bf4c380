"""Unit tests for the restart orchestrator.

This module tests the sequential restart loop including:
- Order of restart and deletion-wait calls
- Abort on the first restart or wait failure
- Pausing between deployments
- Cancellation
"""

import threading
from unittest.mock import MagicMock, call, patch

import pytest

from restarter.core.exceptions import (
    KubectlError,
    KubernetesError,
    RestartCancelledError,
    RestartError,
    WaitError,
)
from restarter.core.models import DeploymentState, RestartPlan
from restarter.rollout.orchestrator import RestartOrchestrator


class TestRun:
    """Tests for RestartOrchestrator.run."""

    def test_restarts_then_waits_in_plan_order(
        self, mock_driver: MagicMock, sample_plan: RestartPlan
    ) -> None:
        """Test each deployment is restarted and waited on before the next."""
        orchestrator = RestartOrchestrator(mock_driver, timeout=300, sleep=0)

        records = orchestrator.run(sample_plan)

        assert mock_driver.mock_calls == [
            call.restart("foo"),
            call.wait_for_deletion(
                ["foo-6d4cf56db6-abcde", "foo-6d4cf56db6-fghij"],
                timeout=300,
                cancel_event=orchestrator.cancel_event,
            ),
            call.restart("bar"),
            call.wait_for_deletion(
                ["bar-7f9c8b5d4-klmno"], timeout=300, cancel_event=orchestrator.cancel_event
            ),
            call.restart("baz"),
            call.wait_for_deletion(
                ["baz-5c7d9f8b6-pqrst"], timeout=300, cancel_event=orchestrator.cancel_event
            ),
        ]
        assert [r.deployment for r in records] == ["foo", "bar", "baz"]
        assert all(r.state == DeploymentState.DONE for r in records)
        assert all(r.duration_seconds is not None for r in records)

    def test_empty_plan_does_nothing(self, mock_driver: MagicMock) -> None:
        """Test an empty plan issues no calls."""
        records = RestartOrchestrator(mock_driver, sleep=0).run(RestartPlan())

        assert records == []
        mock_driver.restart.assert_not_called()

    def test_restart_failure_aborts_before_next_deployment(
        self, mock_driver: MagicMock, sample_plan: RestartPlan
    ) -> None:
        """Test a failed restart of foo stops the run before bar is touched."""
        mock_driver.restart.side_effect = KubectlError("kubectl command failed: exit status 1")
        orchestrator = RestartOrchestrator(mock_driver, sleep=0)

        with pytest.raises(RestartError) as exc_info:
            orchestrator.run(sample_plan)

        assert "foo" in str(exc_info.value)
        mock_driver.restart.assert_called_once_with("foo")
        mock_driver.wait_for_deletion.assert_not_called()
        assert len(orchestrator.records) == 1
        assert orchestrator.records[0].state == DeploymentState.FATAL
        assert "exit status 1" in orchestrator.records[0].error

    def test_wait_failure_aborts(self, mock_driver: MagicMock, sample_plan: RestartPlan) -> None:
        """Test a deletion timeout raises WaitError and skips the rest."""
        mock_driver.wait_for_deletion.side_effect = [
            None,
            KubernetesError("Timed out after 300s waiting for pods"),
        ]
        orchestrator = RestartOrchestrator(mock_driver, timeout=300, sleep=0)

        with pytest.raises(WaitError):
            orchestrator.run(sample_plan)

        assert mock_driver.restart.call_args_list == [call("foo"), call("bar")]
        assert [r.state for r in orchestrator.records] == [
            DeploymentState.DONE,
            DeploymentState.FATAL,
        ]

    def test_unexpected_errors_propagate_unchanged(
        self, mock_driver: MagicMock, sample_plan: RestartPlan
    ) -> None:
        """Test only driver errors are translated."""
        mock_driver.restart.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            RestartOrchestrator(mock_driver, sleep=0).run(sample_plan)


class TestPause:
    """Tests for pausing between deployments."""

    def test_pauses_between_but_not_after_last(
        self, mock_driver: MagicMock, sample_plan: RestartPlan
    ) -> None:
        """Test the sleep runs once between each pair of deployments."""
        event = MagicMock(spec=threading.Event)
        event.is_set.return_value = False
        event.wait.return_value = False
        orchestrator = RestartOrchestrator(mock_driver, sleep=60, cancel_event=event)

        orchestrator.run(sample_plan)

        assert event.wait.call_args_list == [call(60), call(60)]

    def test_cancel_during_pause(self, mock_driver: MagicMock, sample_plan: RestartPlan) -> None:
        """Test setting the token during a pause stops the run."""
        event = threading.Event()
        orchestrator = RestartOrchestrator(mock_driver, sleep=60, cancel_event=event)

        with patch.object(event, "wait", return_value=True):
            with pytest.raises(RestartCancelledError):
                orchestrator.run(sample_plan)

        mock_driver.restart.assert_called_once_with("foo")


class TestCancellation:
    """Tests for the cancel token."""

    def test_cancelled_before_start(self, mock_driver: MagicMock, sample_plan: RestartPlan) -> None:
        """Test a pre-set token prevents any restart."""
        event = threading.Event()
        event.set()

        with pytest.raises(RestartCancelledError):
            RestartOrchestrator(mock_driver, sleep=0, cancel_event=event).run(sample_plan)

        mock_driver.restart.assert_not_called()

    def test_cancel_during_wait(self, mock_driver: MagicMock, sample_plan: RestartPlan) -> None:
        """Test a wait interrupted by the token raises RestartCancelledError."""
        event = threading.Event()

        def _cancel(*args, **kwargs):
            event.set()
            raise KubernetesError("Cancelled while waiting for pods")

        mock_driver.wait_for_deletion.side_effect = _cancel

        with pytest.raises(RestartCancelledError):
            RestartOrchestrator(mock_driver, sleep=0, cancel_event=event).run(sample_plan)

        mock_driver.restart.assert_called_once_with("foo")
