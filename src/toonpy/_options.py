"""Validated encode/decode options and the shared default instance."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any
from typing import Final

from ._errors import ToonValidationError

COMMA: Final = "comma"
TAB: Final = "tab"
PIPE: Final = "pipe"

# Token -> character handed to the codec
DELIMITERS: Final[dict[str, str]] = {COMMA: ",", TAB: "\t", PIPE: "|"}


def _check_delimiter(delimiter: Any) -> None:
    if not isinstance(delimiter, str) or delimiter not in DELIMITERS:
        raise ToonValidationError(
            f"Invalid delimiter {delimiter!r}. "
            "Must be 'comma', 'tab', or 'pipe'"
        )


@dataclass(frozen=True)
class Options:
    """
    Options for TOON encoding and decoding.

    Immutable once built, so a single instance can be validated once and
    reused across any number of calls. Use ``replace`` to derive a variant.

    Attributes:
        delimiter: Delimiter token ('comma', 'tab', or 'pipe').
        strict: Enable strict-mode validation when decoding.
    """

    delimiter: str = COMMA
    strict: bool = False

    def __post_init__(self) -> None:
        _check_delimiter(self.delimiter)
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")

    @property
    def delimiter_char(self) -> str:
        """The delimiter character written between inline values."""
        return DELIMITERS[self.delimiter]

    def replace(self, **changes: Any) -> Options:
        """Returns a validated copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)


DEFAULT_OPTIONS: Final = Options()


def build_options(
    delimiter: str | None = None, strict: bool | None = None
) -> Options:
    """
    Builds Options from loose keyword parameters.

    Absent parameters keep their defaults; when nothing differs from the
    defaults the shared DEFAULT_OPTIONS instance is returned as-is.
    """
    if delimiter is None:
        delimiter = COMMA
    else:
        _check_delimiter(delimiter)
    if strict is None:
        strict = False

    if delimiter == DEFAULT_OPTIONS.delimiter and (
        strict is DEFAULT_OPTIONS.strict
    ):
        return DEFAULT_OPTIONS
    return Options(delimiter=delimiter, strict=strict)
