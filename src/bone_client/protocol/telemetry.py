"""Decoders turning raw sample bodies into named series.

Record layouts (all words big-endian)::

    saw       4 bytes   runtime:20 | amplitude:12
    float32   4 bytes   IEEE-754 single
    channels  5 bytes   channel:8 | IEEE-754 single
    hex       3 bytes   ASCII hex, 0x000-0xFFF

Every decoder rejects a body whose length is not a whole number of records.
"""

from __future__ import annotations

import json
import struct
from typing import Any

from ..exceptions import DecodeError
from ..models.series import Series
from ..models.value import lookup

WORD_SIZE = 4
CHANNEL_RECORD_SIZE = 5
HEX_SAMPLE_SIZE = 3
CHANNEL_COUNT = 8

SAW_LABEL = "saw"
DEFAULT_SYNC_FILTER = ["saw", "int2", "coe", "int"]

_WORD = struct.Struct(">I")
_FLOAT = struct.Struct(">f")
_CHANNEL_RECORD = struct.Struct(">BI")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


def float_from_bits(word: int) -> float:
    """Reinterpret a 32-bit unsigned word as an IEEE-754 single."""
    return _FLOAT.unpack(_WORD.pack(word))[0]


def f32(value: float) -> float:
    """Round a value to the nearest IEEE-754 single."""
    return _FLOAT.unpack(_FLOAT.pack(value))[0]


def _check_records(data: bytes, size: int, what: str) -> None:
    if len(data) % size:
        raise DecodeError(
            f"{what} body of {len(data)} bytes is not a multiple of {size}"
        )


def saw_sample(word: int) -> tuple[float, float]:
    """Split a saw word into (runtime, amplitude)."""
    # Single-precision arithmetic, rounded after every step.
    runtime = f32(f32(((word & 0xFFFFF000) >> 12) / 521.0) * 100.0)
    amplitude = f32(f32(f32((word & 0x00000FFF) / 4096.0) * 5.0) - 2.5) * 2.0
    return runtime, amplitude


def decode_saw(data: bytes) -> list[Series]:
    """Decode saw words into ``rt`` and ``amp`` series."""
    _check_records(data, WORD_SIZE, "saw")
    rt = Series("rt")
    amp = Series("amp")
    for (word,) in _WORD.iter_unpack(data):
        runtime, amplitude = saw_sample(word)
        rt.samples.append(runtime)
        amp.samples.append(amplitude)
    return [rt, amp]


def decode_float32(data: bytes, name: str) -> Series:
    """Decode big-endian IEEE-754 singles into one series."""
    _check_records(data, WORD_SIZE, name)
    return Series(name, [float_from_bits(word) for (word,) in _WORD.iter_unpack(data)])


def decode_labeled(data: bytes, label: str) -> list[Series]:
    """Decode one filter chunk by its label."""
    if label == SAW_LABEL:
        return decode_saw(data)
    return [decode_float32(data, label)]


def decode_channels(data: bytes) -> list[Series]:
    """Decode multiplexed ``(channel, float)`` records.

    Returns one series per channel that has samples, in channel order.
    """
    _check_records(data, CHANNEL_RECORD_SIZE, "channel")
    channels: list[list[float]] = [[] for _ in range(CHANNEL_COUNT)]
    for offset, (channel, word) in enumerate(_CHANNEL_RECORD.iter_unpack(data)):
        if channel >= CHANNEL_COUNT:
            raise DecodeError(
                f"Record {offset} names channel {channel}, "
                f"expected 0-{CHANNEL_COUNT - 1}"
            )
        channels[channel].append(float_from_bits(word))
    return [
        Series(f"channel {index}", samples)
        for index, samples in enumerate(channels)
        if samples
    ]


def hex_sample(value: int) -> float:
    """Scale a 12-bit reading to volts."""
    return f32(f32((value - 2048) / 4096) * 5)


def decode_hex_triplets(data: bytes) -> list[float]:
    """Decode legacy three-character hex samples."""
    _check_records(data, HEX_SAMPLE_SIZE, "hex")
    samples = []
    for offset in range(0, len(data), HEX_SAMPLE_SIZE):
        group = data[offset : offset + HEX_SAMPLE_SIZE]
        if not all(b in _HEX_DIGITS for b in group):
            raise DecodeError(f"Invalid hex sample {group!r} at byte {offset}")
        samples.append(hex_sample(int(group, 16)))
    return samples


def filter_labels(command: Any) -> list[str]:
    """Return the chunk labels a ``sync`` command asks for.

    ``payload.filter`` when it is a list, else :data:`DEFAULT_SYNC_FILTER`.
    """
    labels = lookup(command, "payload", "filter")
    if not isinstance(labels, list):
        return list(DEFAULT_SYNC_FILTER)
    return [
        label if isinstance(label, str) else _label_text(label)
        for label in labels
    ]


def _label_text(label: Any) -> str:
    return json.dumps(label, separators=(",", ":"))


def decode_sync(data: bytes, labels: list[str]) -> list[Series]:
    """Split a ``sync`` body into one equal chunk per label and decode each.

    Raises:
        DecodeError: If there are no labels or the body does not divide
            evenly between them.
    """
    if not labels:
        raise DecodeError("Sync filter is empty")
    if len(data) % len(labels):
        raise DecodeError(
            f"Sync body of {len(data)} bytes does not split "
            f"into {len(labels)} equal chunks"
        )
    chunk = len(data) // len(labels)
    series: list[Series] = []
    for index, label in enumerate(labels):
        series.extend(decode_labeled(data[index * chunk : (index + 1) * chunk], label))
    return series
