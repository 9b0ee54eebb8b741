"""Exception hierarchy for the session / monitoring layer."""

from __future__ import annotations


class SessionError(Exception):
    """Base exception for dashboard session errors."""


class UnknownDeviceError(SessionError, KeyError):
    """No device with the requested id is in the directory."""

    def __init__(self, device_id: str) -> None:
        super().__init__(device_id)
        self.device_id = device_id

    def __str__(self) -> str:
        return f"unknown device: {self.device_id}"
