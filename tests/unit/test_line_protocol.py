from __future__ import annotations

import numpy as np
import pytest

from influxql_client import line_protocol
from influxql_client.exceptions import ArgumentError
from influxql_client.line_protocol import encode_point


def test_single_field_no_tags() -> None:
    assert encode_point("cpu", {"value": 42}, {}, 1000.0) == "cpu value=42 1000"


def test_multiple_tags_and_fields_in_mapping_order() -> None:
    line = encode_point(
        "cpu_load",
        {"value": 0.64, "count": 3},
        tags={"host": "server01", "region": "us-west"},
        timestamp=1500000000.0,
    )
    assert line == "cpu_load,host=server01,region=us-west value=0.64,count=3 1500000000"


def test_empty_fields_raise_argument_error() -> None:
    with pytest.raises(ArgumentError, match="at least one value"):
        encode_point("cpu", {}, {"host": "a"}, 1.0)


def test_argument_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        encode_point("cpu", {})


def test_timestamp_rounds_to_nearest_second() -> None:
    assert encode_point("m", {"v": 1}, timestamp=1000.6).endswith(" 1001")
    assert encode_point("m", {"v": 1}, timestamp=1000.4).endswith(" 1000")


def test_timestamp_defaults_to_current_time(monkeypatch) -> None:
    monkeypatch.setattr(line_protocol.time, "time", lambda: 1234.7)
    assert encode_point("m", {"v": 1}) == "m v=1 1235"


def test_value_types() -> None:
    line = encode_point("m", {"ok": True, "bad": False, "temp": 21.5, "label": "idle"}, timestamp=0)
    assert line == 'm ok=true,bad=false,temp=21.5,label="idle" 0'


def test_reserved_characters_are_escaped() -> None:
    line = encode_point(
        "disk usage,total",
        {"free space": 'say "hi"\\'},
        tags={"path": "/mnt/a b", "k=v": "x,y"},
        timestamp=5,
    )
    assert line == (
        r"disk\ usage\,total,path=/mnt/a\ b,k\=v=x\,y "
        r'free\ space="say \"hi\"\\" 5'
    )


def test_none_field_value_is_rejected() -> None:
    with pytest.raises(ArgumentError, match="'v'"):
        encode_point("m", {"v": None}, timestamp=0)


def test_numpy_scalars_are_typed_like_builtins() -> None:
    line = encode_point("m", {"ok": np.bool_(True), "n": np.int64(3), "f": np.float64(0.25)}, timestamp=0)
    assert line == "m ok=true,n=3,f=0.25 0"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), np.float64("nan")])
def test_non_finite_floats_are_rejected(value) -> None:
    with pytest.raises(ArgumentError, match="finite"):
        encode_point("m", {"v": value}, timestamp=0)
