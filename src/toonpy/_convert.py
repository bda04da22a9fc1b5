"""
Conversion between Python objects and the canonical value tree.

The canonical tree is the JSON-shaped value model the codec understands:
None, bool, int, float, str, list and str-keyed dict. ``to_canonical``
builds a fresh tree from any supported Python object; ``from_canonical``
builds fresh Python containers from a tree returned by the codec.

Both directions handle primitive container elements inline and only recurse
for nested containers, since TOON documents are dominated by flat rows.
"""

from __future__ import annotations

import math
import numbers
import operator
from collections.abc import Mapping
from enum import Enum
from typing import Any
from typing import Final
from typing import TypeAlias

from ._codec import I64_MAX
from ._codec import I64_MIN
from ._codec import U64_MAX
from ._errors import ToonValidationError

JsonValue: TypeAlias = (
    "str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]"
)

# Exact types passed through untouched by the outbound fast path
_SCALAR_TYPES: Final = frozenset({type(None), bool, int, float, str})

# int -> str conversion is capped at 4300 digits; stay below it
_PRINTABLE_BITS: Final = 14000


class ValueKind(Enum):
    """Tags of the canonical value model."""

    NULL = "null"
    BOOL = "bool"
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def _integer(value: int) -> int:
    if I64_MIN <= value <= U64_MAX:
        return value
    if value.bit_length() > _PRINTABLE_BITS:
        shown = f"of {value.bit_length()} bits"
    else:
        shown = str(value)
    raise ToonValidationError(
        f"Integer {shown} out of range for 64-bit TOON numbers"
    )


def _finite(value: float) -> float:
    if math.isfinite(value):
        return value
    raise ToonValidationError(
        f"Invalid float value (NaN or Infinity): {value!r}"
    )


def _key_to_str(key: Any) -> str:
    if isinstance(key, str):
        return str.__str__(key)
    try:
        return str(key)
    except Exception as e:  # str() of an arbitrary key may raise anything
        raise ToonValidationError(
            f"Cannot convert key of type '{type(key).__name__}' to string"
        ) from e


def kind_of(value: Any) -> ValueKind:
    """
    Classifies a canonical value by its tag.

    Integers above the signed 64-bit range are UNSIGNED. Values outside the
    canonical model, including non-finite floats, raise ToonValidationError.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        if I64_MIN <= value <= I64_MAX:
            return ValueKind.INTEGER
        _integer(value)
        return ValueKind.UNSIGNED
    if isinstance(value, float):
        _finite(value)
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise ToonValidationError(
        f"Type '{type(value).__name__}' is not a canonical TOON value"
    )


def to_canonical(obj: Any) -> JsonValue:
    """
    Converts a Python object to a canonical value tree.

    Classification order matters because bool is a subclass of int:
    None, bool, integral, real, str, list/tuple, mapping. Anything else is
    rejected with the name of its type, and a container that contains
    itself is rejected as a circular reference.
    """
    return _to_canonical(obj, set())


def _enter(container: Any, active: set[int]) -> int:
    marker = id(container)
    if marker in active:
        raise ToonValidationError("Circular reference detected")
    active.add(marker)
    return marker


def _to_canonical(obj: Any, active: set[int]) -> JsonValue:  # noqa: PLR0911
    if obj is None:
        return None
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, numbers.Integral):
        return _integer(operator.index(obj))
    if isinstance(obj, numbers.Real):
        return _finite(float(obj))
    if isinstance(obj, str):
        return str.__str__(obj)
    if isinstance(obj, list | tuple):
        return _array_to_canonical(obj, active)
    if isinstance(obj, Mapping):
        return _object_to_canonical(obj, active)
    raise ToonValidationError(
        f"Cannot convert type '{type(obj).__name__}' to TOON format"
    )


def _array_to_canonical(
    seq: list[Any] | tuple[Any, ...], active: set[int]
) -> list[JsonValue]:
    marker = _enter(seq, active)
    items: list[JsonValue] = []
    append = items.append
    for item in seq:
        kind = type(item)
        if item is None or kind is str or kind is bool:
            append(item)
        elif kind is int:
            append(_integer(item))
        elif kind is float:
            append(_finite(item))
        else:
            append(_to_canonical(item, active))
    active.discard(marker)
    return items


def _object_to_canonical(
    mapping: Mapping[Any, Any], active: set[int]
) -> dict[str, JsonValue]:
    marker = _enter(mapping, active)
    result: dict[str, JsonValue] = {}
    for key, value in mapping.items():
        if type(key) is not str:
            key = _key_to_str(key)

        kind = type(value)
        if value is None or kind is str or kind is bool:
            result[key] = value
        elif kind is int:
            result[key] = _integer(value)
        elif kind is float:
            result[key] = _finite(value)
        else:
            result[key] = _to_canonical(value, active)
    active.discard(marker)
    return result


def from_canonical(value: JsonValue) -> Any:
    """Converts a canonical value tree to fresh Python objects."""
    if isinstance(value, dict):
        return _object_from_canonical(value)
    if isinstance(value, list):
        return _array_from_canonical(value)
    if type(value) in _SCALAR_TYPES:
        return value
    raise ToonValidationError(
        f"Unexpected value of type '{type(value).__name__}' in TOON data"
    )


def _array_from_canonical(arr: list[JsonValue]) -> list[Any]:
    items: list[Any] = []
    append = items.append
    for item in arr:
        if type(item) in _SCALAR_TYPES:
            append(item)
        else:
            append(from_canonical(item))
    return items


def _object_from_canonical(obj: dict[str, JsonValue]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in obj.items():
        if type(value) in _SCALAR_TYPES:
            result[key] = value
        else:
            result[key] = from_canonical(value)
    return result
