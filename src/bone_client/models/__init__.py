"""Data models for decoded responses and telemetry."""

from .series import DeviceIdentity, Series, SyncResult
from .value import MISSING, lookup
