"""Unit tests for RequestDeduplicator."""

from samlink.dedup import RequestDeduplicator, dedup_key


class TestRequestDeduplicator:
    """Tests for duplicate suppression inside the window."""

    def test_repeat_inside_window_is_dropped(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)

        assert dedup.should_process("portal:1") is True
        clock.advance(29.9)
        assert dedup.should_process("portal:1") is False

    def test_accepted_again_after_window(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)

        assert dedup.should_process("portal:1") is True
        assert dedup.should_process("portal:1") is False
        clock.advance(30)
        assert dedup.should_process("portal:1") is True

    def test_rejection_does_not_extend_window(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)

        dedup.should_process("portal:1")
        clock.advance(20)
        assert dedup.should_process("portal:1") is False
        clock.advance(10)
        assert dedup.should_process("portal:1") is True

    def test_keys_are_independent(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)

        assert dedup.should_process(dedup_key("123", "1")) is True
        assert dedup.should_process(dedup_key("123", "2")) is True
        assert dedup.should_process(dedup_key("456", "1")) is True
        assert len(dedup) == 3

    def test_accepting_drops_expired_markers(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)
        dedup.should_process("portal:1")
        dedup.should_process("portal:2")

        clock.advance(30)
        dedup.should_process("portal:3")

        assert len(dedup) == 1

    def test_forget(self, clock):
        dedup = RequestDeduplicator(window_seconds=30, clock=clock)

        dedup.should_process("portal:1")
        dedup.forget("portal:1")

        assert dedup.should_process("portal:1") is True


def test_dedup_key_accepts_ints():
    assert dedup_key(123, 456) == "123:456"
