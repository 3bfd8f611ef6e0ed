"""Decoded telemetry models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Series:
    """A named, ordered run of decoded samples."""

    name: str
    samples: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    def __repr__(self) -> str:
        return f"Series(name={self.name!r}, samples={len(self.samples)})"

    def to_dict(self) -> dict:
        return {"name": self.name, "samples": list(self.samples)}


@dataclass
class SyncResult:
    """Series decoded from a positioned response, plus the device cursor."""

    cursor: int
    series: list[Series] = field(default_factory=list)

    def names(self) -> list[str]:
        return [s.name for s in self.series]

    def get(self, name: str) -> Series | None:
        for s in self.series:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict:
        return {
            "cursor": self.cursor,
            "series": [s.to_dict() for s in self.series],
        }


@dataclass
class DeviceIdentity:
    """Identification fields reported by the ``serial_number`` command."""

    serial_number: str | None = None
    alias: str | None = None

    @property
    def label(self) -> str:
        """Alias if set, else serial number, else an empty string."""
        return self.alias or self.serial_number or ""

    def to_dict(self) -> dict:
        return {
            "serial_number": self.serial_number,
            "alias": self.alias,
            "label": self.label,
        }
