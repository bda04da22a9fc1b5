"""
TOON encoding and decoding for Python objects.

Bridges arbitrary Python values and the ``toon_format`` codec through a
canonical JSON-shaped value tree, with an API shaped like the standard
library json module plus option objects, byte and batch variants.
"""

import io
import logging
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import IO
from typing import Any

import orjson

from ._codec import CodecError
from ._codec import ToonFormatCodec
from ._codec import TranscodeError
from ._convert import JsonValue
from ._convert import ValueKind
from ._convert import from_canonical
from ._convert import kind_of
from ._convert import to_canonical
from ._errors import ToonError
from ._errors import ToonIOError
from ._errors import ToonSyntaxError
from ._errors import ToonValidationError
from ._errors import map_codec_error
from ._options import COMMA
from ._options import DEFAULT_OPTIONS
from ._options import PIPE
from ._options import TAB
from ._options import Options
from ._options import build_options

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "TOONPY_PROFILE" in os.environ

_default_codec = ToonFormatCodec()


@dataclass
class HotPathStats:
    """Statistics for profiling one conversion or codec phase."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    items_processed: int = 0

    def record_call(self, duration_ns: int, items: int = 0) -> None:
        """Records a phase run with its timing and item count."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.items_processed += items


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, items_to_process: int = 0):
            self.func_name = func_name
            self.items = items_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.items)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:
    # Zero-cost in production - ignore arguments to nullcontext
    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str, items: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


def _resolve_options(options: Options | None) -> Options:
    if options is None:
        return DEFAULT_OPTIONS
    if not isinstance(options, Options):
        raise TypeError(
            f"options must be an Options instance, not "
            f"{type(options).__name__}"
        )
    return options


def _check_document(toon_str: Any) -> None:
    if not isinstance(toon_str, str):
        raise TypeError(
            f"the TOON document must be str, not {type(toon_str).__name__}"
        )


def _check_batch(items: Any, name: str) -> None:
    if not isinstance(items, list | tuple):
        raise TypeError(
            f"{name} must be a list or tuple, not {type(items).__name__}"
        )


def _encode_canonical(value: JsonValue, options: Options) -> str:
    try:
        return _default_codec.encode(value, options)
    except CodecError as e:
        logger.debug("TOON encode failed: %r", e)
        raise map_codec_error(e) from e


def _decode_canonical(toon_str: str, options: Options) -> JsonValue:
    try:
        return _default_codec.decode(toon_str, options)
    except CodecError as e:
        logger.debug("TOON decode failed: %r", e)
        raise map_codec_error(e) from e


def _encode(data: Any, options: Options) -> str:
    with ProfileContext("to_canonical", 1):
        value = to_canonical(data)
    with ProfileContext("codec_encode", 1):
        return _encode_canonical(value, options)


def _decode(toon_str: str, options: Options) -> Any:
    with ProfileContext("codec_decode", 1):
        value = _decode_canonical(toon_str, options)
    with ProfileContext("from_canonical", 1):
        return from_canonical(value)


def encode(
    data: Any, delimiter: str | None = None, strict: bool | None = None
) -> str:
    """
    Encodes a Python object to a TOON string.

    Accepts None, bool, int, float, str, lists/tuples and mappings, nested
    arbitrarily. Raises ToonValidationError for values outside that model or
    an invalid delimiter, and ToonError if the codec rejects the value.

    >>> encode({"name": "Alice", "age": 30})
    'name: Alice\\nage: 30'
    """
    options = build_options(delimiter, strict)
    return _encode(data, options)


def decode(
    toon_str: str, delimiter: str | None = None, strict: bool | None = None
) -> Any:
    """
    Decodes a TOON string to Python objects.

    The delimiter is only a hint; the codec detects delimiters from array
    headers. Raises ToonSyntaxError with the offending line for malformed
    documents.

    >>> decode("name: Alice\\nage: 30")
    {'name': 'Alice', 'age': 30}
    """
    _check_document(toon_str)
    options = build_options(delimiter, strict)
    return _decode(toon_str, options)


def encode_with_options(data: Any, options: Options | None = None) -> str:
    """Encodes a Python object using a prebuilt Options instance."""
    return _encode(data, _resolve_options(options))


def decode_with_options(toon_str: str, options: Options | None = None) -> Any:
    """Decodes a TOON string using a prebuilt Options instance."""
    _check_document(toon_str)
    return _decode(toon_str, _resolve_options(options))


def encode_bytes(data: Any, options: Options | None = None) -> bytes:
    """Encodes a Python object to UTF-8 TOON bytes."""
    options = _resolve_options(options)
    with ProfileContext("to_canonical", 1):
        value = to_canonical(data)

    buffer = io.BytesIO()
    with ProfileContext("codec_encode", 1):
        try:
            _default_codec.encode_to_sink(buffer, value, options)
        except CodecError as e:
            raise map_codec_error(e) from e
    return buffer.getvalue()


def decode_bytes(toon_bytes: bytes, options: Options | None = None) -> Any:
    """Decodes UTF-8 TOON bytes to Python objects."""
    if not isinstance(toon_bytes, bytes | bytearray | memoryview):
        raise TypeError(
            "the TOON document must be bytes-like, not "
            f"{type(toon_bytes).__name__}"
        )
    options = _resolve_options(options)

    with ProfileContext("codec_decode", 1):
        try:
            value = _default_codec.decode_from_source(
                bytes(toon_bytes), options
            )
        except CodecError as e:
            raise map_codec_error(e) from e
    with ProfileContext("from_canonical", 1):
        return from_canonical(value)


def dumps(data: Any) -> str:
    """Serializes a Python object to a TOON string (alias for encode)."""
    return _encode(data, DEFAULT_OPTIONS)


def loads(toon_str: str) -> Any:
    """Deserializes a TOON string to Python objects (alias for decode)."""
    _check_document(toon_str)
    return _decode(toon_str, DEFAULT_OPTIONS)


def dump(data: Any, fp: IO[str], options: Options | None = None) -> None:
    """
    Serializes a Python object to TOON and writes it to a file-like object.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(encode_with_options(data, options))


def load(fp: IO[str] | IO[bytes], options: Options | None = None) -> Any:
    """
    Reads a whole TOON document from a file-like object and decodes it.

    Binary files are decoded as UTF-8.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    content = fp.read()
    if isinstance(content, bytes | bytearray):
        return decode_bytes(content, options)
    return decode_with_options(content, options)


def json_to_toon(
    json_str: str | bytes,
    delimiter: str | None = None,
    strict: bool | None = None,
) -> str:
    """
    Converts a JSON document straight to a TOON string.

    The parsed JSON is already canonical, so no Python-object conversion
    happens on the way to the codec.
    """
    options = build_options(delimiter, strict)
    with ProfileContext("transcode", 1):
        try:
            value = orjson.loads(json_str)
        except orjson.JSONDecodeError as e:
            raise map_codec_error(TranscodeError("Invalid JSON", str(e))) from e
    with ProfileContext("codec_encode", 1):
        return _encode_canonical(value, options)


def toon_to_json(
    toon_str: str, pretty: bool = False, strict: bool | None = None
) -> str:
    """
    Converts a TOON string straight to a JSON document.

    With ``pretty`` the output is indented by two spaces.
    """
    _check_document(toon_str)
    options = build_options(None, strict)
    with ProfileContext("codec_decode", 1):
        value = _decode_canonical(toon_str, options)

    option = orjson.OPT_INDENT_2 if pretty else None
    with ProfileContext("transcode", 1):
        try:
            return orjson.dumps(value, option=option).decode("utf-8")
        except orjson.JSONEncodeError as e:
            err = TranscodeError("JSON encoding error", str(e))
            raise map_codec_error(err) from e


def validate(data: Any, options: Options | None = None) -> bool:
    """
    Reports whether a Python object can be encoded to TOON.

    Runs the full encode path and never raises; any failure yields False.
    """
    try:
        _encode(data, _resolve_options(options))
    except Exception as e:
        logger.debug("Value does not encode to TOON: %s", e)
        return False
    return True


def encode_batch(
    objects: Sequence[Any],
    delimiter: str | None = None,
    strict: bool | None = None,
) -> list[str]:
    """
    Encodes many Python objects, returning one TOON string per object.

    All objects are converted before the codec runs, and the codec phase
    touches only the converted trees. The first failure aborts the whole
    batch.

    >>> encode_batch([{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}])
    ['id: 1\\nname: Alice', 'id: 2\\nname: Bob']
    """
    _check_batch(objects, "objects")
    options = build_options(delimiter, strict)

    with ProfileContext("to_canonical", len(objects)):
        values = [to_canonical(obj) for obj in objects]

    with ProfileContext("codec_encode", len(values)):
        results = [_encode_canonical(value, options) for value in values]

    logger.debug("Encoded TOON batch of %d values", len(results))
    return results


def decode_batch(
    toon_strings: Sequence[str],
    delimiter: str | None = None,
    strict: bool | None = None,
) -> list[Any]:
    """
    Decodes many TOON strings, returning one Python object per string.

    Every string is parsed before any Python objects are built. The first
    failure aborts the whole batch.
    """
    _check_batch(toon_strings, "toon_strings")
    for toon_str in toon_strings:
        _check_document(toon_str)
    options = build_options(delimiter, strict)

    with ProfileContext("codec_decode", len(toon_strings)):
        values = [_decode_canonical(s, options) for s in toon_strings]

    with ProfileContext("from_canonical", len(values)):
        results = [from_canonical(value) for value in values]

    logger.debug("Decoded TOON batch of %d documents", len(results))
    return results


__all__ = [
    "COMMA",
    "DEFAULT_OPTIONS",
    "PIPE",
    "TAB",
    "HotPathStats",
    "Options",
    "ToonError",
    "ToonIOError",
    "ToonSyntaxError",
    "ToonValidationError",
    "ValueKind",
    "build_options",
    "clear_hot_path_stats",
    "decode",
    "decode_batch",
    "decode_bytes",
    "decode_with_options",
    "dump",
    "dumps",
    "encode",
    "encode_batch",
    "encode_bytes",
    "encode_with_options",
    "from_canonical",
    "get_hot_path_stats",
    "json_to_toon",
    "kind_of",
    "load",
    "loads",
    "to_canonical",
    "toon_to_json",
    "validate",
]
