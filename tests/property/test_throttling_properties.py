from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from transientretry.throttling import (
    DECODE_ORDER,
    ThrottlingCondition,
    ThrottlingMode,
    from_error_message,
    from_reason_code,
)

_POSITIVE_CODES = st.integers(min_value=1, max_value=2**31 - 1)


@given(_POSITIVE_CODES)
def test_positive_codes_decode_every_group(code: int) -> None:
    condition = from_reason_code(code)

    assert condition.mode.value == code & 0b11
    assert [entry.resource for entry in condition.resources] == list(DECODE_ORDER)
    group = code >> 8
    for entry in condition.resources:
        assert entry.severity.value == group & 0b11
        group >>= 2


@given(st.integers(max_value=0))
def test_non_positive_codes_are_unknown(code: int) -> None:
    condition = from_reason_code(code)

    assert condition == ThrottlingCondition.unknown()
    assert condition.mode is ThrottlingMode.UNKNOWN


@given(st.integers())
def test_decoding_is_deterministic(code: int) -> None:
    assert from_reason_code(code) == from_reason_code(code)


@given(_POSITIVE_CODES, st.text(max_size=40).filter(lambda text: "code" not in text.lower()))
def test_message_decode_matches_reason_code(code: int, prefix: str) -> None:
    assert from_error_message(f"{prefix} Code: {code}.") == from_reason_code(code)


@given(st.text(max_size=80))
def test_message_decode_never_raises(message: str) -> None:
    assert isinstance(from_error_message(message), ThrottlingCondition)
