from __future__ import annotations

import pytest

from utils.performance import Timing, timings_to_dict, track_time


def test_track_time_appends_to_sink():
    sink = []
    with track_time("extract", sink, side="left") as timing:
        pass

    assert sink == [timing]
    assert timing.name == "extract"
    assert timing.duration >= 0
    assert timing.metadata == {"side": "left"}


def test_track_time_records_on_error():
    sink = []
    with pytest.raises(RuntimeError):
        with track_time("align", sink):
            raise RuntimeError("boom")
    assert [t.name for t in sink] == ["align"]


def test_track_time_without_sink():
    with track_time("noop") as timing:
        pass
    assert timing.duration >= 0


def test_timings_to_dict_adds_total():
    result = timings_to_dict([Timing("a", 0.25), Timing("b", 0.5)])
    assert result == {"a": 0.25, "b": 0.5, "total": 0.75}
