"""
Batch operation tests.

Validates ordering, all-or-nothing failure, and that every conversion runs
before the codec phase begins.
"""

import importlib
from collections.abc import Iterator
from typing import Any

import pytest

import toonpy
from toonpy._codec import CodecSyntaxError

from .conftest import StubCodec


def test_encode_batch_scenario() -> None:
    """
    Validates two rows encode to two independent documents in input order.
    """
    rows = [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]
    results = toonpy.encode_batch(rows)

    assert len(results) == 2
    assert "name: Alice" in results[0]
    assert "name: Bob" in results[1]
    assert [toonpy.decode(text) for text in results] == rows


def test_encode_batch_matches_single_encode(
    sample_rows: list[dict[str, Any]],
) -> None:
    """
    Validates each batch result equals the single-value encoding.
    """
    results = toonpy.encode_batch(sample_rows, delimiter="pipe")
    assert results == [
        toonpy.encode(row, delimiter="pipe") for row in sample_rows
    ]


def test_decode_batch_round_trip(sample_rows: list[dict[str, Any]]) -> None:
    """
    Validates decode_batch inverts encode_batch in order.
    """
    texts = toonpy.encode_batch(sample_rows)
    assert toonpy.decode_batch(texts) == sample_rows
    assert toonpy.decode_batch(tuple(texts)) == sample_rows


def test_empty_batches() -> None:
    """
    Validates empty input yields empty output.
    """
    assert toonpy.encode_batch([]) == []
    assert toonpy.decode_batch([]) == []


@pytest.mark.parametrize("objects", [{"a": 1}, "a: 1", None, iter([1])])
def test_encode_batch_requires_sequence(objects: Any) -> None:
    """
    Validates batch input must be a list or tuple.
    """
    with pytest.raises(TypeError, match="list or tuple"):
        toonpy.encode_batch(objects)


def test_decode_batch_rejects_non_string_items() -> None:
    """
    Validates every batch item must be a str document.
    """
    with pytest.raises(TypeError, match="the TOON document must be str"):
        toonpy.decode_batch(["a: 1", b"b: 2"])  # type: ignore[list-item]


def test_encode_batch_converts_everything_before_codec(
    stub_codec: StubCodec,
) -> None:
    """
    Validates a bad item anywhere fails the batch before the codec runs.
    """
    with pytest.raises(toonpy.ToonValidationError, match="'set'"):
        toonpy.encode_batch([{"a": 1}, {"b": 2}, {"c": {3}}])
    assert stub_codec.calls == []


def test_decode_batch_parses_everything_before_converting(
    stub_codec: StubCodec,
) -> None:
    """
    Validates every document is decoded before Python objects are built.
    """
    stub_codec.decoded = {"bad": (1, 2)}
    with pytest.raises(toonpy.ToonValidationError):
        toonpy.decode_batch(["a: 1", "b: 2", "c: 3"])
    assert [name for name, _ in stub_codec.calls] == ["decode"] * 3


def test_decode_batch_fails_atomically(stub_codec: StubCodec) -> None:
    """
    Validates a codec failure returns no partial results.
    """
    stub_codec.error = CodecSyntaxError(1, "bad header")
    with pytest.raises(toonpy.ToonSyntaxError, match="^Line 1: bad header$"):
        toonpy.decode_batch(["a: 1", "b: 2"])
    assert len(stub_codec.calls) == 1


def test_batch_options_validated_once(stub_codec: StubCodec) -> None:
    """
    Validates the whole batch shares one Options instance.
    """
    toonpy.encode_batch([1, 2, 3], delimiter="tab", strict=True)
    seen = {id(opts) for _, opts in stub_codec.calls}
    assert len(seen) == 1
    assert stub_codec.calls[0][1] == toonpy.Options("tab", True)


def test_batch_invalid_delimiter() -> None:
    """
    Validates a bad delimiter fails the batch up front.
    """
    with pytest.raises(toonpy.ToonValidationError, match="'csv'"):
        toonpy.decode_batch(["a: 1"], delimiter="csv")


def test_hot_path_stats(sample_rows: list[dict[str, Any]]) -> None:
    """
    Validates phase statistics are recorded only when profiling is enabled.
    """
    toonpy.clear_hot_path_stats()
    toonpy.encode_batch(sample_rows)
    stats = toonpy.get_hot_path_stats()

    if toonpy.PROFILE_HOT_PATHS:
        assert stats["to_canonical"].items_processed == len(sample_rows)
        assert stats["codec_encode"].call_count == 1
    else:
        assert stats == {}
    toonpy.clear_hot_path_stats()


def test_hot_path_stats_accumulate() -> None:
    """
    Validates HotPathStats sums repeated phase runs.
    """
    stats = toonpy.HotPathStats("codec_decode")
    stats.record_call(100, 2)
    stats.record_call(50, 3)
    assert stats.call_count == 2
    assert stats.total_time_ns == 150
    assert stats.items_processed == 5


@pytest.fixture
def profiled(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """
    Reloads toonpy with TOONPY_PROFILE set, restoring it afterwards.
    """
    monkeypatch.setenv("TOONPY_PROFILE", "1")
    importlib.reload(toonpy)
    yield
    monkeypatch.undo()
    importlib.reload(toonpy)


@pytest.mark.usefixtures("profiled")
def test_profiling_records_each_phase(
    sample_rows: list[dict[str, Any]],
) -> None:
    """
    Validates enabled profiling counts calls, items and time per phase.
    """
    assert toonpy.PROFILE_HOT_PATHS
    toonpy.clear_hot_path_stats()

    texts = toonpy.encode_batch(sample_rows)
    toonpy.decode(texts[0])
    stats = toonpy.get_hot_path_stats()

    assert stats["to_canonical"].items_processed == len(sample_rows)
    assert stats["to_canonical"].call_count == 1
    assert stats["codec_encode"].items_processed == len(sample_rows)
    assert stats["codec_decode"].call_count == 1
    assert stats["from_canonical"].items_processed == 1
    assert all(s.total_time_ns >= 0 for s in stats.values())

    stats.clear()
    assert "to_canonical" in toonpy.get_hot_path_stats()
    toonpy.clear_hot_path_stats()
    assert toonpy.get_hot_path_stats() == {}
