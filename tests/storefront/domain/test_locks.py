"""Tests for per-entity write locks."""

import threading
import time

import pytest
from storefront.utils.locks import KeyedLocks, check_single_writer, entity_key


def test_entity_key():
    assert entity_key("product", "prod-001") == "product:prod-001"


def test_hold_is_reentrant():
    locks = KeyedLocks()
    with locks.hold("a", "b"):
        with locks.hold("b"):
            pass


def test_duplicate_keys_are_held_once():
    locks = KeyedLocks()
    with locks.hold("a", "a"):
        pass
    with locks.hold("a"):
        pass


def test_same_key_serializes_writers():
    locks = KeyedLocks()
    events = []

    def writer(name):
        with locks.hold("client:1"):
            events.append(f"{name}-in")
            time.sleep(0.05)
            events.append(f"{name}-out")

    threads = [threading.Thread(target=writer, args=(name,)) for name in ("first", "second")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert events[0].endswith("-in") and events[1].endswith("-out")
    assert events[0].split("-")[0] == events[1].split("-")[0]


def test_overlapping_key_sets_do_not_deadlock():
    locks = KeyedLocks()
    done = []

    def writer(keys):
        for _ in range(50):
            with locks.hold(*keys):
                pass
        done.append(keys)

    threads = [
        threading.Thread(target=writer, args=(("a", "b"),)),
        threading.Thread(target=writer, args=(("b", "a"),)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(done) == 2


def test_released_keys_are_dropped():
    locks = KeyedLocks()
    with locks.hold("order:1", "client:1"):
        assert len(locks) == 2
        with locks.hold("client:1"):
            assert len(locks) == 2
        assert len(locks) == 2
    assert len(locks) == 0


def test_key_kept_while_another_writer_waits():
    locks = KeyedLocks()
    entered = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold("product:1"):
            entered.set()
            release.wait(timeout=5)

    def waiter():
        with locks.hold("product:1"):
            pass

    first = threading.Thread(target=holder)
    first.start()
    entered.wait(timeout=5)
    second = threading.Thread(target=waiter)
    second.start()
    time.sleep(0.05)
    assert len(locks) == 1

    release.set()
    first.join(timeout=5)
    second.join(timeout=5)
    assert len(locks) == 0


def test_many_keys_do_not_accumulate():
    locks = KeyedLocks()
    for n in range(500):
        with locks.hold(entity_key("order", n)):
            pass
    assert len(locks) == 0


def test_single_worker_is_accepted(monkeypatch):
    monkeypatch.delenv("WEB_CONCURRENCY", raising=False)
    check_single_writer()
    monkeypatch.setenv("WEB_CONCURRENCY", "1")
    check_single_writer()


def test_several_workers_are_refused(monkeypatch):
    monkeypatch.setenv("WEB_CONCURRENCY", "4")
    with pytest.raises(RuntimeError, match="single writer"):
        check_single_writer()
