"""Tolerant decoders for API fields with inconsistent JSON encodings.

Depending on the PVE version and storage backend, some disk-listing fields
arrive as bare integers, as quoted integers, or as sentinel strings. The
decoders below normalize each field to a single Python shape so callers
never see the variance.

Both decoders raise MalformedField, which pydantic lets propagate unchanged
out of model validation (it only collects ValueError/AssertionError).
"""

import re
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationInfo

from pveclient.client.exceptions import MalformedField

NOT_AVAILABLE = "N/A"

_DECIMAL = re.compile(r"^-?\d+$")


class WearIndicator(BaseModel):
    """SSD wear-out reading.

    ``present`` is False when the disk reports no wear information
    (``"N/A"``); ``value`` is then 0 and carries no meaning.
    """

    model_config = ConfigDict(frozen=True)

    present: bool
    value: int = 0

    @classmethod
    def unavailable(cls) -> "WearIndicator":
        return cls(present=False)

    @classmethod
    def of(cls, value: int) -> "WearIndicator":
        return cls(present=True, value=value)


def _parse_decimal(raw: Any, field: str) -> int:
    # bool is an int subclass; JSON true/false is never a number here
    if isinstance(raw, bool):
        raise MalformedField(field, raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _DECIMAL.match(raw):
        return int(raw)
    raise MalformedField(field, raw)


def decode_optional_int(raw: Any, field: str = "osdid") -> int:
    """Decode an integer sent either bare or quoted.

    ``-1`` is kept as-is: it is the API's "not applicable" sentinel and is
    distinct from the field being absent.

    Args:
        raw: Raw JSON value
        field: Field name used in error messages

    Returns:
        The integer value

    Raises:
        MalformedField: For booleans, objects, lists, floats or non-decimal strings

    Examples:
        >>> decode_optional_int(-1)
        -1
        >>> decode_optional_int("42")
        42
    """
    return _parse_decimal(raw, field)


def decode_wear_indicator(raw: Any, field: str = "wearout") -> WearIndicator:
    """Decode a wear-out percentage that may be ``"N/A"``.

    Args:
        raw: Raw JSON value
        field: Field name used in error messages

    Returns:
        WearIndicator with ``present`` set accordingly

    Raises:
        MalformedField: For any shape other than "N/A" or a decimal integer

    Examples:
        >>> decode_wear_indicator("N/A")
        WearIndicator(present=False, value=0)
        >>> decode_wear_indicator("37")
        WearIndicator(present=True, value=37)
    """
    if isinstance(raw, WearIndicator):
        return raw
    if raw == NOT_AVAILABLE:
        return WearIndicator.unavailable()
    return WearIndicator.of(_parse_decimal(raw, field))


def _validate_optional_int(value: Any, info: ValidationInfo) -> int:
    return decode_optional_int(value, info.field_name or "osdid")


def _validate_wear_indicator(value: Any, info: ValidationInfo) -> WearIndicator:
    return decode_wear_indicator(value, info.field_name or "wearout")


OptionalInt = Annotated[int, BeforeValidator(_validate_optional_int)]
Wearout = Annotated[WearIndicator, BeforeValidator(_validate_wear_indicator)]
