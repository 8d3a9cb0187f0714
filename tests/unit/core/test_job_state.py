"""
Unit tests for the discovery job lifecycle.
"""
import pytest

from core.job_state import InvalidJobTransition, JobState, JobStatus


class TestJobState:

    def test_happy_path(self):
        state = JobState().start().record_found(12)
        state = state.record_analyzed().record_analyzed()
        done = state.complete()

        assert done.status == JobStatus.COMPLETED
        assert done.candidates_found == 12
        assert done.candidates_analyzed == 2
        assert done.completed_at is not None
        assert done.error_message is None

    def test_transitions_return_new_states(self):
        pending = JobState()
        running = pending.start()
        assert pending.status == JobStatus.PENDING
        assert running.status == JobStatus.RUNNING

    def test_fail_from_pending_and_running(self):
        assert JobState().fail("boom").status == JobStatus.FAILED
        failed = JobState().start().fail("Apify token is not configured")
        assert failed.error_message == "Apify token is not configured"
        assert failed.completed_at is not None

    def test_fail_without_message(self):
        assert JobState().start().fail("").error_message == "Unknown error"

    @pytest.mark.parametrize("terminal", [
        JobState().start().complete(),
        JobState().start().fail("x"),
    ])
    def test_terminal_states_are_final(self, terminal):
        assert terminal.status.is_terminal
        with pytest.raises(InvalidJobTransition):
            terminal.fail("again")
        with pytest.raises(InvalidJobTransition):
            terminal.complete()
        with pytest.raises(InvalidJobTransition):
            terminal.record_analyzed()

    def test_cannot_skip_running(self):
        with pytest.raises(InvalidJobTransition):
            JobState().complete()
        with pytest.raises(InvalidJobTransition):
            JobState().record_found(3)

    def test_found_is_written_once(self):
        state = JobState().start().record_found(3)
        with pytest.raises(InvalidJobTransition):
            state.record_found(4)

    def test_negative_found_rejected(self):
        with pytest.raises(InvalidJobTransition):
            JobState().start().record_found(-1)

    def test_cannot_start_twice(self):
        with pytest.raises(InvalidJobTransition):
            JobState().start().start()
