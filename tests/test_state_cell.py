"""Tests for the observable state cell."""

import logging

from permitsync.app.state_cell import StateCell


class TestStateCell:
    def test_initial_value(self):
        cell = StateCell((), name="permits")
        assert cell.value == ()
        assert cell.name == "permits"

    def test_set_notifies_synchronously(self):
        cell = StateCell(0)
        seen = []
        cell.subscribe(seen.append)
        cell.set(1)
        cell.set(2)
        assert seen == [1, 2]

    def test_unsubscribe(self):
        cell = StateCell(0)
        seen = []
        unsubscribe = cell.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        cell.set(5)
        assert seen == []

    def test_failing_subscriber_does_not_block_others(self, caplog):
        cell = StateCell(0, name="counter")
        seen = []

        def broken(_value):
            raise RuntimeError("widget gone")

        cell.subscribe(broken)
        cell.subscribe(seen.append)
        with caplog.at_level(logging.WARNING, logger="permitsync.state"):
            cell.set(3)

        assert cell.value == 3
        assert seen == [3]
        assert "Subscriber failed for counter" in caplog.text

    def test_read_only_view_tracks_value(self):
        cell = StateCell("a")
        view = cell.read_only()
        seen = []
        view.subscribe(seen.append)
        cell.set("b")
        assert view.value == "b"
        assert seen == ["b"]
        assert not hasattr(view, "set")
