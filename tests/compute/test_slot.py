from __future__ import annotations

import threading

import pytest

from engine.compute.errors import BusyError
from engine.compute.slot import ContextSlot


@pytest.mark.smoke
def test_try_acquire_is_non_blocking_and_exclusive() -> None:
    slot: ContextSlot[str] = ContextSlot("ctx")
    with slot.try_acquire() as lease:
        assert slot.locked()
        assert lease.context == "ctx"
        with pytest.raises(BusyError):
            with slot.try_acquire():
                pass
    assert not slot.locked()


def test_lock_held_by_other_thread_is_busy() -> None:
    slot: ContextSlot[str] = ContextSlot("ctx")
    held = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with slot.try_acquire():
            held.set()
            release.wait(2.0)

    t = threading.Thread(target=holder)
    t.start()
    try:
        assert held.wait(2.0)
        with pytest.raises(BusyError):
            with slot.try_acquire():
                pass
    finally:
        release.set()
        t.join(2.0)
    with slot.try_acquire() as lease:
        assert lease.context == "ctx"


def test_replace_swaps_context_and_lease_expires() -> None:
    slot: ContextSlot[str] = ContextSlot("old")
    with slot.try_acquire() as lease:
        lease.replace("new")
        assert lease.context == "new"
    with pytest.raises(RuntimeError):
        _ = lease.context
    with slot.try_acquire() as lease2:
        assert lease2.context == "new"


def test_lock_is_released_when_body_raises() -> None:
    slot: ContextSlot[int] = ContextSlot(1)
    with pytest.raises(ValueError):
        with slot.try_acquire():
            raise ValueError("boom")
    assert not slot.locked()
