"""Caller-visible error hierarchy and the mapping of codec failures onto it."""

from __future__ import annotations

from ._codec import CodecError
from ._codec import CodecIOError
from ._codec import CodecMessageError
from ._codec import CodecSyntaxError
from ._codec import TranscodeError


class ToonError(Exception):
    """Base exception for TOON encoding and decoding failures."""


class ToonSyntaxError(ToonError):
    """
    Raised when a TOON document cannot be parsed.

    Carries the 1-based line reported by the codec so the failure can be
    located by hand.
    """

    def __init__(self, msg: str, lineno: int | None = None) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")

        self.msg = msg
        self.lineno = lineno

        if lineno is None:
            super().__init__(msg)
        else:
            super().__init__(f"Line {lineno}: {msg}")


class ToonIOError(ToonError):
    """Raised when reading or writing TOON bytes fails."""


class ToonValidationError(ValueError):
    """
    Raised for input that can never be encoded.

    Covers invalid option tokens and host values outside the canonical value
    model. Never raised by the codec and never a subclass of ToonError.
    """


def map_codec_error(err: CodecError) -> ToonError:
    """Translates a codec-origin failure into its caller-visible kind."""
    if isinstance(err, CodecSyntaxError):
        return ToonSyntaxError(err.message, err.line)
    if isinstance(err, CodecIOError):
        return ToonIOError(err.description)
    if isinstance(err, CodecMessageError):
        return ToonError(err.message)
    if isinstance(err, TranscodeError):
        return ToonError(f"{err.stage}: {err.description}")
    return ToonError(str(err))
