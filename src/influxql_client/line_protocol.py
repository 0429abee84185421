"""Line protocol encoding for single points."""

from __future__ import annotations

from numbers import Integral, Real
from typing import Any, Mapping, Optional
import math
import time

import numpy as np

from .exceptions import ArgumentError

_MEASUREMENT_ESCAPES = str.maketrans({",": r"\,", " ": r"\ "})
_KEY_ESCAPES = str.maketrans({",": r"\,", "=": r"\=", " ": r"\ "})


def encode_point(
    measurement: str,
    fields: Mapping[str, Any],
    tags: Optional[Mapping[str, Any]] = None,
    timestamp: Optional[float] = None,
) -> str:
    """Render one point as ``name[,tag=val]* field=val[,field=val]* seconds``.

    Tags and fields keep mapping iteration order. ``timestamp`` is in seconds
    and defaults to the current time; it is rounded to the nearest second.
    """
    if not fields:
        raise ArgumentError("Must provide at least one value")
    if timestamp is None:
        timestamp = time.time()

    tag_str = "".join(
        f",{_escape_key(key)}={_escape_key(value)}" for key, value in (tags or {}).items()
    )
    field_str = ",".join(
        f"{_escape_key(key)}={_format_field_value(key, value)}" for key, value in fields.items()
    )
    return f"{_escape_measurement(measurement)}{tag_str} {field_str} {int(round(timestamp))}"


def _escape_measurement(name: str) -> str:
    return str(name).translate(_MEASUREMENT_ESCAPES)


def _escape_key(value: Any) -> str:
    return str(value).translate(_KEY_ESCAPES)


def _format_field_value(key: str, value: Any) -> str:
    if value is None:
        raise ArgumentError(f"Field {key!r} has no value")
    # bool before Integral: bool is an Integral subclass
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, Integral):
        return str(int(value))
    if isinstance(value, Real):
        if not math.isfinite(value):
            raise ArgumentError(f"Field {key!r} is not a finite number: {value!r}")
        return repr(float(value))
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'
