"""
Pytest configuration and shared fixtures for toonpy tests.

Provides immutable round-trip cases and a stub codec for driving the error
paths without depending on how the real codec words its failures.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest

import toonpy
from toonpy._codec import CodecError


@dataclass(frozen=True)
class RoundTripCase:
    """
    Immutable container for a value that must survive encode then decode.
    """

    description: str
    value: Any


@dataclass
class StubCodec:
    """
    Records the options it was called with and raises a preset codec error.

    With no error set it returns canned results: ``encoded`` from the encode
    operations and ``decoded`` from the decode operations.
    """

    error: CodecError | None = None
    encoded: str = "stub"
    decoded: Any = None
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    def encode(self, value: Any, options: toonpy.Options) -> str:
        self.calls.append(("encode", options))
        self._maybe_fail()
        return self.encoded

    def decode(self, text: str, options: toonpy.Options) -> Any:
        self.calls.append(("decode", options))
        self._maybe_fail()
        return self.decoded

    def encode_to_sink(
        self, sink: Any, value: Any, options: toonpy.Options
    ) -> None:
        self.calls.append(("encode_to_sink", options))
        self._maybe_fail()
        sink.write(self.encoded.encode("utf-8"))

    def decode_from_source(self, source: bytes, options: toonpy.Options) -> Any:
        self.calls.append(("decode_from_source", options))
        self._maybe_fail()
        return self.decoded


@pytest.fixture
def stub_codec(monkeypatch: pytest.MonkeyPatch) -> Iterator[StubCodec]:
    """
    Replaces the process-wide codec with a StubCodec for one test.
    """
    stub = StubCodec()
    monkeypatch.setattr(toonpy, "_default_codec", stub)
    yield stub


@pytest.fixture
def round_trip_cases() -> list[RoundTripCase]:
    """
    Provides documents that must decode back to exactly what was encoded.
    """
    return [
        RoundTripCase("flat object", {"name": "Alice", "age": 30}),
        RoundTripCase(
            "nested object",
            {"user": {"id": 7, "profile": {"city": "Paris", "active": True}}},
        ),
        RoundTripCase(
            "tabular rows",
            {
                "users": [
                    {"id": 1, "name": "Alice", "score": 9.5},
                    {"id": 2, "name": "Bob", "score": 7.25},
                ]
            },
        ),
        RoundTripCase("primitive array", {"tags": ["red", "green", "blue"]}),
        RoundTripCase("numbers", {"neg": -42, "big": 2**62, "pi": 3.5}),
        RoundTripCase("nulls and bools", {"a": None, "b": False, "c": True}),
        RoundTripCase(
            "strings needing quotes",
            {"csv": "a,b", "num": "123", "word": "true", "colon": "k: v"},
        ),
        RoundTripCase("unicode", {"greeting": "héllo wörld ✓"}),
        RoundTripCase(
            "mixed array",
            {"items": [1, "two", {"three": 3}]},
        ),
    ]


@pytest.fixture
def sample_rows() -> list[dict[str, Any]]:
    """
    Provides a small table of uniform rows, the typical batch workload.
    """
    return [
        {"id": 1, "name": "Alice"},
        {"id": 2, "name": "Bob"},
        {"id": 3, "name": "Carol"},
    ]
