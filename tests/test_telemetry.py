"""Tests for telemetry decoders."""

import math
import struct

import pytest

from bone_client.exceptions import DecodeError
from bone_client.models.series import Series
from bone_client.protocol.telemetry import (
    DEFAULT_SYNC_FILTER,
    decode_channels,
    decode_float32,
    decode_hex_triplets,
    decode_saw,
    decode_sync,
    filter_labels,
    float_from_bits,
)


def words(*values: int) -> bytes:
    return b"".join(struct.pack(">I", v) for v in values)


def floats(*values: float) -> bytes:
    return b"".join(struct.pack(">f", v) for v in values)


def single(value: float) -> float:
    return struct.unpack(">f", struct.pack(">f", value))[0]


def test_float_from_bits():
    """Bit-casting is a reinterpretation, not a conversion."""
    assert float_from_bits(0x3FC00000) == 1.5
    assert float_from_bits(0x00000000) == 0.0
    assert float_from_bits(0xBF800000) == -1.0


def test_saw_zero_word():
    """An all-zero word is zero runtime at the negative amplitude limit."""
    rt, amp = decode_saw(words(0x00000000))
    assert rt == Series("rt", [0.0])
    assert amp == Series("amp", [-5.0])


def test_saw_full_word():
    """An all-ones word gives the maximum runtime and amplitude."""
    rt, amp = decode_saw(words(0xFFFFFFFF))
    assert rt.samples[0] == pytest.approx(0xFFFFF / 521 * 100)
    assert amp.samples[0] == pytest.approx((4095 / 4096 * 5 - 2.5) * 2)


def test_saw_field_split():
    """Runtime is the top 20 bits, amplitude the low 12."""
    rt, amp = decode_saw(words(0x00001800, 0x00002000))
    assert rt.samples == pytest.approx([100 / 521, 200 / 521])
    assert amp.samples == pytest.approx([0.0, -5.0])


@pytest.mark.parametrize("word", [0x00001000, 0x00001800, 0x12345678, 0xFFFFFFFF])
def test_saw_samples_are_single_precision(word):
    """Decoded saw values are exactly representable as 32-bit floats."""
    rt, amp = decode_saw(words(word))
    assert rt.samples[0] == single(rt.samples[0])
    assert amp.samples[0] == single(amp.samples[0])


def test_saw_runtime_rounded_per_step():
    """Runtime is rounded to single after the division and the scaling."""
    rt, _ = decode_saw(words(0x00001000))
    assert rt.samples[0] == single(single(1 / 521.0) * 100.0)
    assert rt.samples[0] != 100 / 521


def test_saw_empty():
    """An empty body still yields both (empty) series."""
    assert decode_saw(b"") == [Series("rt"), Series("amp")]


def test_float32_decode():
    """Float32 words become one series named after the label."""
    series = decode_float32(words(0x3FC00000, 0x40000000), "int")
    assert series.name == "int"
    assert series.samples == [1.5, 2.0]


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7])
def test_float32_rejects_partial_word(size):
    with pytest.raises(DecodeError):
        decode_float32(b"\x00" * size, "int")


def test_saw_rejects_partial_word():
    with pytest.raises(DecodeError):
        decode_saw(b"\x00" * 6)


def test_decoders_reinterpret_word_bits():
    """Float and channel decoders keep sign and NaN bit patterns."""
    series = decode_float32(words(0x80000000, 0x7FC00000), "int")
    assert math.copysign(1.0, series.samples[0]) == -1.0
    assert math.isnan(series.samples[1])

    (channel,) = decode_channels(b"\x02" + struct.pack(">I", 0xBF800000))
    assert channel == Series("channel 2", [float_from_bits(0xBF800000)])
    assert channel.samples == [-1.0]


def test_channels_decode():
    """Records are grouped per channel; empty channels are omitted."""
    data = b"\x00" + words(0x3F800000) + b"\x03" + words(0x40000000)
    series = decode_channels(data)
    assert series == [Series("channel 0", [1.0]), Series("channel 3", [2.0])]


def test_channels_order_is_by_index():
    """Series come out in channel order, not arrival order."""
    data = b"\x05" + floats(1.0) + b"\x01" + floats(2.0) + b"\x05" + floats(3.0)
    series = decode_channels(data)
    assert [s.name for s in series] == ["channel 1", "channel 5"]
    assert series[1].samples == [1.0, 3.0]


def test_channels_reject_out_of_range_index():
    with pytest.raises(DecodeError):
        decode_channels(b"\x08" + floats(1.0))


def test_channels_reject_partial_record():
    with pytest.raises(DecodeError):
        decode_channels(b"\x00" + floats(1.0) + b"\x01")


def test_hex_triplets():
    """Three hex characters per sample, scaled to volts."""
    assert decode_hex_triplets(b"800") == [0.0]
    assert decode_hex_triplets(b"000") == [-2.5]
    assert decode_hex_triplets(b"fff") == pytest.approx([(4095 - 2048) / 4096 * 5])
    assert decode_hex_triplets(b"800000FFF") == pytest.approx([0.0, -2.5, 2.498779296875])


def test_hex_samples_are_single_precision():
    samples = decode_hex_triplets(b"001123abcfff")
    assert samples == [single(s) for s in samples]


def test_hex_triplets_reject_partial_group():
    with pytest.raises(DecodeError):
        decode_hex_triplets(b"8000")


@pytest.mark.parametrize("data", [b"80g", b"+80", b" 80", b"\xff00"])
def test_hex_triplets_reject_non_hex(data):
    with pytest.raises(DecodeError):
        decode_hex_triplets(data)


def test_filter_labels_default():
    """Without a filter list the default order applies."""
    assert filter_labels({"command": "sync"}) == DEFAULT_SYNC_FILTER
    assert filter_labels({"command": "sync", "payload": {"filter": "int"}}) == DEFAULT_SYNC_FILTER


def test_filter_labels_from_payload():
    assert filter_labels({"command": "sync", "payload": {"filter": ["int", "saw"]}}) == ["int", "saw"]


def test_filter_labels_non_string_items():
    """Non-string labels are used as their JSON text."""
    assert filter_labels({"command": "sync", "payload": {"filter": [1, None]}}) == ["1", "null"]


def test_decode_sync_default_filter():
    """The body splits into equal chunks decoded in filter order."""
    data = words(0x00000000) + floats(1.0) + floats(2.0) + floats(3.0)
    series = decode_sync(data, DEFAULT_SYNC_FILTER)
    assert [s.name for s in series] == ["rt", "amp", "int2", "coe", "int"]
    assert series[1].samples == [-5.0]
    assert series[2].samples == [1.0]
    assert series[4].samples == [3.0]


def test_decode_sync_multiple_samples_per_chunk():
    data = floats(1.0, 2.0) + floats(3.0, 4.0)
    series = decode_sync(data, ["int", "coe"])
    assert series == [Series("int", [1.0, 2.0]), Series("coe", [3.0, 4.0])]


def test_decode_sync_indivisible_body():
    """A body that does not split evenly is rejected, never truncated."""
    with pytest.raises(DecodeError):
        decode_sync(b"\x00" * 18, DEFAULT_SYNC_FILTER)


def test_decode_sync_chunk_not_word_aligned():
    """Even chunks must still be whole words."""
    with pytest.raises(DecodeError):
        decode_sync(b"\x00" * 6, ["int", "coe"])


def test_decode_sync_empty_filter():
    with pytest.raises(DecodeError):
        decode_sync(b"", [])
