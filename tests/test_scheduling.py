"""Tests for the virtual-clock scheduler and the debouncer."""

from __future__ import annotations

import asyncio

import pytest

from tagsearch.utils.scheduling import Debouncer, LoopScheduler, ManualScheduler


def test_manual_scheduler_fires_in_deadline_order():
    scheduler = ManualScheduler()
    fired: list[str] = []
    scheduler.call_later(0.3, lambda: fired.append("late"))
    scheduler.call_later(0.1, lambda: fired.append("early"))

    assert scheduler.advance(0.05) == 0
    assert scheduler.advance(0.3) == 2
    assert fired == ["early", "late"]
    assert scheduler.now == pytest.approx(0.35)


def test_manual_scheduler_skips_cancelled_timers():
    scheduler = ManualScheduler()
    fired: list[int] = []
    timer = scheduler.call_later(0.1, lambda: fired.append(1))
    timer.cancel()

    assert scheduler.pending == 0
    scheduler.advance(1)
    assert fired == []


def test_debouncer_only_runs_last_trigger():
    scheduler = ManualScheduler()
    calls: list[float] = []
    debouncer = Debouncer(0.5, lambda: calls.append(scheduler.now), scheduler)

    debouncer.trigger()
    scheduler.advance(0.25)
    debouncer.trigger()
    scheduler.advance(0.25)
    assert calls == []
    assert debouncer.pending

    scheduler.advance(0.25)
    assert calls == [0.75]
    assert not debouncer.pending


def test_debouncer_cancel_drops_pending_action():
    scheduler = ManualScheduler()
    calls: list[int] = []
    debouncer = Debouncer(0.1, lambda: calls.append(1), scheduler)

    debouncer.trigger()
    debouncer.cancel()
    scheduler.advance(1)
    assert calls == []


def test_debouncer_flush_runs_immediately_once():
    scheduler = ManualScheduler()
    calls: list[int] = []
    debouncer = Debouncer(0.1, lambda: calls.append(1), scheduler)

    assert debouncer.flush() is False
    debouncer.trigger()
    assert debouncer.flush() is True
    scheduler.advance(1)
    assert calls == [1]


@pytest.mark.asyncio
async def test_loop_scheduler_uses_running_loop():
    fired = asyncio.Event()
    debouncer = Debouncer(0.01, fired.set, LoopScheduler())

    debouncer.trigger()
    await asyncio.wait_for(fired.wait(), timeout=1)
    assert not debouncer.pending
