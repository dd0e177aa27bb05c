import threading

import pytest

from weather_skill.core.locks import SessionLocks


def test_entry_exists_only_while_held():
    locks = SessionLocks()

    with locks.hold("weather", "a"):
        with locks.hold("weather", "b"):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_same_session_turns_run_one_after_another():
    locks = SessionLocks()
    entered = threading.Event()
    release = threading.Event()
    order = []

    def first():
        with locks.hold("weather", "a"):
            entered.set()
            release.wait(timeout=2)
            order.append("first")

    def second():
        entered.wait(timeout=2)
        with locks.hold("weather", "a"):
            order.append("second")

    threads = [threading.Thread(target=first), threading.Thread(target=second)]
    for thread in threads:
        thread.start()
    entered.wait(timeout=2)
    release.set()
    for thread in threads:
        thread.join()

    assert order == ["first", "second"]
    assert len(locks) == 0


def test_entry_is_released_when_turn_raises():
    locks = SessionLocks()

    with pytest.raises(RuntimeError):
        with locks.hold("weather", "a"):
            raise RuntimeError("turn failed")

    assert len(locks) == 0
