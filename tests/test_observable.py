"""Tests for observable properties."""

from tagsearch.utils.observable import Observable


def test_publishes_changes_to_subscribers():
    observable = Observable(0, name="count")
    seen: list[int] = []
    observable.subscribe(seen.append)

    assert observable.set(1) is True
    assert observable.set(1) is False
    observable.set(2)
    assert seen == [1, 2]
    assert observable.value == 2


def test_unsubscribe_and_replay():
    observable = Observable("a")
    seen: list[str] = []
    unsubscribe = observable.subscribe(seen.append, replay=True)
    observable.set("b")
    unsubscribe()
    observable.set("c")
    assert seen == ["a", "b"]


def test_failing_subscriber_does_not_block_others():
    observable = Observable(0)
    seen: list[int] = []

    def explode(_value):
        raise RuntimeError("boom")

    observable.subscribe(explode)
    observable.subscribe(seen.append)
    observable.set(5)
    assert seen == [5]
