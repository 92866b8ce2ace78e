"""Unit tests for the bracketed key-value encoder."""

from __future__ import annotations

import enum
import math
from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kvlog.encoder import (
    FIELDS,
    EncoderConfig,
    KeyValueEncoder,
    capital_level,
    format_float,
    full_caller,
    millis_duration,
    nanos_duration,
    short_caller,
    string_duration,
)
from kvlog.level import Level


def _event(fields: dict[str, object] | None = None, **meta: object) -> dict[str, object]:
    event: dict[str, object] = {
        FIELDS: dict(fields or {}),
        "timestamp": "2019-04-01T15:39:09.142773Z",
        "level": Level.INFO,
        "pathname": "/srv/app/handlers/user.py",
        "lineno": 12,
        "event": "hello",
    }
    event.update(meta)
    return event


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestLayout:
    def test_metadata_order(self) -> None:
        enc = KeyValueEncoder()
        line = enc(None, "msg", _event(logger="a.b"))
        assert line == (
            "[ts:2019-04-01T15:39:09.142773Z][level:info][logger:a.b]"
            "[caller:handlers/user.py:12][msg:hello]"
        )

    def test_empty_name_omitted(self) -> None:
        line = KeyValueEncoder()(None, "msg", _event(logger=""))
        assert "[logger:" not in line

    def test_fields_follow_message_in_insertion_order(self) -> None:
        line = KeyValueEncoder()(None, "msg", _event({"b": 2, "a": 1, "z": "last"}))
        assert line.endswith("[msg:hello][b:2][a:1][z:last]")

    def test_stack_is_last_and_verbatim(self) -> None:
        line = KeyValueEncoder()(None, "msg", _event({"k": "v"}, stack="Stack:\n  File x\n"))
        assert line.endswith("[msg:hello][k:v][stacktrace:Stack:\n  File x]")

    def test_empty_key_drops_segment(self) -> None:
        enc = KeyValueEncoder(EncoderConfig(time_key="", caller_key=""))
        assert enc(None, "msg", _event()) == "[level:info][msg:hello]"

    def test_custom_keys_and_encoders(self) -> None:
        cfg = EncoderConfig(
            level_key="L",
            message_key="M",
            encode_level=capital_level,
            encode_caller=full_caller,
        )
        line = KeyValueEncoder(cfg)(None, "msg", _event())
        assert "[L:INFO]" in line
        assert "[caller:/srv/app/handlers/user.py:12]" in line
        assert "[M:hello]" in line


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class TestValues:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("text", "text"),
            ("two\nlines\r", "two\\nlines\\r"),
            (True, "true"),
            (False, "false"),
            (1234, "1234"),
            (-7, "-7"),
            (1234.5678, "1234.5678"),
            (1.0, "1"),
            (1e21, "1000000000000000000000"),
            (float("nan"), "NaN"),
            (float("inf"), "+Inf"),
            (float("-inf"), "-Inf"),
            (Level.WARN, "warn"),
            (timedelta(milliseconds=374), "0.374"),
            (ValueError("my error"), "my error"),
            (b"raw", "raw"),
            (Decimal("1.50"), "1.50"),
            ({"a": [1, 2]}, '{"a":[1,2]}'),
            ((1, "x"), '[1,"x"]'),
            ({3, 1, 2}, "[1,2,3]"),
            (None, "None"),
        ],
    )
    def test_encode_value(self, value: object, expected: str) -> None:
        assert KeyValueEncoder().encode_value(value) == expected

    def test_aware_datetime_rendered_in_utc(self) -> None:
        value = datetime(2020, 1, 1, 3, 0, tzinfo=timezone(timedelta(hours=2)))
        assert KeyValueEncoder().encode_value(value) == "2020-01-01T01:00:00.000000Z"

    def test_epoch(self) -> None:
        assert KeyValueEncoder().encode_value(datetime(1970, 1, 1, tzinfo=UTC)) == "1970-01-01T00:00:00.000000Z"

    def test_mapping_with_unserialisable_values(self) -> None:
        rendered = KeyValueEncoder().encode_value({"when": timedelta(seconds=1)})
        assert rendered == '{"when":"0:00:01"}'

    def test_multiline_error_escaped(self) -> None:
        assert KeyValueEncoder().encode_value(RuntimeError("a\nb")) == "a\\nb"

    def test_mapping_with_non_string_keys_falls_back_to_repr(self) -> None:
        assert KeyValueEncoder().encode_value({(1, 2): 3}) == "{(1, 2): 3}"

    def test_self_referencing_list_falls_back_to_repr(self) -> None:
        value: list[object] = []
        value.append(value)
        assert KeyValueEncoder().encode_value(value) == "[[...]]"

    def test_enum_rendered_by_name(self) -> None:
        class Color(enum.IntEnum):
            RED = 1

        enc = KeyValueEncoder()
        assert enc.encode_value(Color.RED) == "RED"
        assert enc.encode_value(Level.DEBUG) == "debug"


class TestFieldNames:
    @pytest.mark.parametrize(
        "key",
        ["timestamp", "level", "logger", "pathname", "lineno", "event", "stack", "stack_info", "fields"],
    )
    def test_metadata_names_are_ordinary_fields(self, key: str) -> None:
        line = KeyValueEncoder()(None, "msg", _event({key: "x"}))
        assert line == (
            "[ts:2019-04-01T15:39:09.142773Z][level:info]"
            f"[caller:handlers/user.py:12][msg:hello][{key}:x]"
        )


class TestElementEncoders:
    def test_short_caller(self) -> None:
        assert short_caller("/src/app/handlers/user.py", 12) == "handlers/user.py:12"
        assert short_caller("user.py", 3) == "user.py:3"

    def test_durations(self) -> None:
        value = timedelta(seconds=1, microseconds=500)
        assert millis_duration(value) == "1000.5"
        assert nanos_duration(value) == "1000500000"
        assert string_duration(value) == "0:00:01.000500"

    def test_duration_encoder_is_pluggable(self) -> None:
        enc = KeyValueEncoder(EncoderConfig(encode_duration=millis_duration))
        assert enc.encode_value(timedelta(milliseconds=374)) == "374"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


_scalars = st.one_of(
    st.text(),
    st.integers(),
    st.floats(),
    st.booleans(),
    st.binary(),
    st.lists(st.text(), max_size=3),
    st.dictionaries(st.text(), st.text(), max_size=3),
)


class TestProperties:
    @given(value=_scalars)
    def test_values_never_contain_raw_newlines(self, value: object) -> None:
        rendered = KeyValueEncoder().encode_value(value)
        assert "\n" not in rendered
        assert "\r" not in rendered

    @given(key=st.text(), msg=st.text())
    def test_line_is_single_line(self, key: str, msg: str) -> None:
        line = KeyValueEncoder()(None, "msg", _event({f"f_{key}": msg}, event=msg))
        assert "\n" not in line

    @given(value=st.floats(allow_nan=False, allow_infinity=False))
    def test_float_round_trip(self, value: float) -> None:
        parsed = float(format_float(value))
        assert parsed == value
        assert math.copysign(1.0, parsed) == math.copysign(1.0, value)
