"""
Adapter around the ``toon_format`` codec.

Presents the codec as four pure operations over canonical values and reports
every failure as one of the CodecError variants below, so nothing outside
this module depends on how ``toon_format`` signals errors.
"""

from __future__ import annotations

import re
from typing import IO
from typing import TYPE_CHECKING
from typing import Any
from typing import Final

import toon_format
from toon_format import DecodeOptions
from toon_format import ToonDecodeError

if TYPE_CHECKING:
    from ._options import Options

_LINE_PREFIX = re.compile(r"^\s*line\s+(\d+)\s*:\s*", re.IGNORECASE)
_LINE_MENTION = re.compile(r"\bline\s+(\d+)\b", re.IGNORECASE)

# Integer range of the value model: signed 64-bit plus the unsigned upper half
I64_MIN: Final = -(2**63)
I64_MAX: Final = 2**63 - 1
U64_MAX: Final = 2**64 - 1


class CodecError(Exception):
    """Base for failures reported by the codec."""


class CodecSyntaxError(CodecError):
    """Malformed TOON text, with the 1-based line when the codec knows it."""

    def __init__(self, line: int | None, message: str) -> None:
        self.line = line
        self.message = message
        super().__init__(line, message)


class CodecMessageError(CodecError):
    """Free-text failure from the codec."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CodecIOError(CodecError):
    """Failure reading from a source or writing to a sink."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(description)


class TranscodeError(CodecError):
    """Failure in the embedded JSON stage of a format-to-format conversion."""

    def __init__(self, stage: str, description: str) -> None:
        self.stage = stage
        self.description = description
        super().__init__(stage, description)


def _syntax_error(exc: Exception) -> CodecSyntaxError:
    """Extracts the line number and bare message from a codec parse error."""
    message = str(exc.args[0]) if exc.args else str(exc)
    line = getattr(exc, "lineno", None)

    prefix = _LINE_PREFIX.match(message)
    if prefix:
        message = message[prefix.end() :]
        line = line or int(prefix.group(1))
    elif line is None:
        mention = _LINE_MENTION.search(message)
        if mention:
            line = int(mention.group(1))

    return CodecSyntaxError(line, message)


def _widen_number(value: int) -> int | float:
    if I64_MIN <= value <= U64_MAX:
        return value
    try:
        return float(value)
    except OverflowError as e:
        raise CodecMessageError(
            f"Number of {value.bit_length()} bits is too large for a float"
        ) from e


def _widen_integers(value: Any) -> Any:
    """
    Replaces decoded integers outside the 64-bit range with floats.

    The codec writes large floats such as 1e20 as bare digits and reads them
    back as Python ints; those become floats again, as a JSON number would.
    Works in place on the freshly decoded tree.
    """
    if isinstance(value, dict):
        for key, item in value.items():
            if type(item) is int or isinstance(item, dict | list):
                value[key] = _widen_integers(item)
        return value
    if isinstance(value, list):
        for index, item in enumerate(value):
            if type(item) is int or isinstance(item, dict | list):
                value[index] = _widen_integers(item)
        return value
    if type(value) is int:
        return _widen_number(value)
    return value


class ToonFormatCodec:
    """
    Codec contract backed by ``toon_format``.

    Stateless apart from the indent width, so one instance is shared by every
    call in the process.
    """

    def __init__(self, indent: int = 2) -> None:
        if not isinstance(indent, int) or indent < 1:
            raise ValueError("indent must be a positive integer")
        self.indent = indent

    def encode(self, value: Any, options: Options) -> str:
        """Encodes a canonical value to TOON text."""
        try:
            return toon_format.encode(
                value,
                {"indent": self.indent, "delimiter": options.delimiter_char},
            )
        except (TypeError, ValueError) as e:
            raise CodecMessageError(str(e)) from e

    def decode(self, text: str, options: Options) -> Any:
        """Decodes TOON text to a canonical value."""
        decode_options = DecodeOptions(
            indent=self.indent, strict=options.strict
        )
        try:
            value = toon_format.decode(text, decode_options)
        except (ToonDecodeError, SyntaxError) as e:
            raise _syntax_error(e) from e
        except (TypeError, ValueError) as e:
            raise CodecMessageError(str(e)) from e
        return _widen_integers(value)

    def encode_to_sink(
        self, sink: IO[bytes], value: Any, options: Options
    ) -> None:
        """Encodes a canonical value and writes it to a binary sink as UTF-8."""
        data = self.encode(value, options).encode("utf-8")
        try:
            sink.write(data)
        except OSError as e:
            raise CodecIOError(str(e)) from e

    def decode_from_source(self, source: bytes, options: Options) -> Any:
        """Decodes UTF-8 TOON bytes to a canonical value."""
        try:
            text = source.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"stream did not contain valid UTF-8: {e}"
            raise CodecIOError(msg) from e
        return self.decode(text, options)
