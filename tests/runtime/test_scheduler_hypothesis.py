from __future__ import annotations

from dataclasses import replace

import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a test optional dependency")
from hypothesis import given, settings, strategies as st  # type: ignore

from engine.params import ParamSnapshot
from engine.runtime import JobScheduler
from tests._utils.dummies import GatedRunner


@settings(max_examples=30, deadline=None)
@given(edits=st.lists(st.integers(min_value=1, max_value=500), min_size=1, max_size=12))
def test_any_burst_of_edits_yields_at_most_one_follow_up(edits: list[int]) -> None:
    state = {"params": ParamSnapshot(max_iterations=1000)}
    runner = GatedRunner()
    s = JobScheduler(runner=runner, snapshot=lambda: state["params"], dims=lambda: (2, 2))

    s.tick(0.0)
    for n in edits:
        state["params"] = replace(state["params"], max_iterations=n)
        s.tick(0.0)
    assert s.dispatched_count == 1

    runner.gate.set()
    for _ in range(3):
        h = s.handle
        if h is not None:
            assert h.wait(2.0)
        s.tick(0.0)

    assert s.dispatched_count == 2
    assert runner.jobs[-1].snapshot.max_iterations == edits[-1]
    assert s.last_dispatched == state["params"]
