"""Unit tests for the backoff executor."""
from unittest.mock import Mock

import pytest

from fieldops_api.application.services.backoff import (
    SINGLE_ATTEMPT,
    RetryPolicy,
    execute_with_backoff,
)


@pytest.mark.unit
class TestExecuteWithBackoff:
    """Tests for execute_with_backoff."""

    def test_returns_first_success_without_sleeping(self):
        sleep = Mock()
        operation = Mock(return_value="ok")

        result = execute_with_backoff(operation, sleep=sleep)

        assert result == "ok"
        operation.assert_called_once()
        sleep.assert_not_called()

    def test_retries_with_geometric_delays(self):
        sleep = Mock()
        operation = Mock(side_effect=[RuntimeError("e1"), RuntimeError("e2"), "ok"])

        result = execute_with_backoff(
            operation,
            max_attempts=3,
            initial_delay=1.0,
            multiplier=2.0,
            sleep=sleep,
        )

        assert result == "ok"
        assert operation.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_reraises_last_error_unchanged(self):
        last_error = RuntimeError("final")
        operation = Mock(side_effect=[RuntimeError("first"), last_error])

        with pytest.raises(RuntimeError) as exc_info:
            execute_with_backoff(operation, max_attempts=2, sleep=Mock())

        assert exc_info.value is last_error
        assert operation.call_count == 2

    def test_delay_capped_at_max_delay(self):
        sleep = Mock()
        operation = Mock(side_effect=[ValueError()] * 4 + ["ok"])

        execute_with_backoff(
            operation,
            max_attempts=5,
            initial_delay=1.0,
            max_delay=3.0,
            multiplier=2.0,
            sleep=sleep,
        )

        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 3.0, 3.0]

    def test_non_retriable_error_raised_immediately(self):
        sleep = Mock()
        operation = Mock(side_effect=KeyError("fatal"))

        with pytest.raises(KeyError):
            execute_with_backoff(
                operation,
                should_retry=lambda e: not isinstance(e, KeyError),
                sleep=sleep,
            )

        operation.assert_called_once()
        sleep.assert_not_called()

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            execute_with_backoff(Mock(), max_attempts=0)


@pytest.mark.unit
class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_single_attempt_never_retries(self):
        operation = Mock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            SINGLE_ATTEMPT.execute(operation, sleep=Mock())

        operation.assert_called_once()

    def test_policy_passes_parameters(self):
        sleep = Mock()
        policy = RetryPolicy(max_attempts=2, initial_delay=0.5)
        operation = Mock(side_effect=[RuntimeError(), 42])

        assert policy.execute(operation, sleep=sleep) == 42
        sleep.assert_called_once_with(0.5)
