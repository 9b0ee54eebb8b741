"""Notification gate — decides which alert interrupts the operator."""

from __future__ import annotations

from enum import StrEnum

import structlog

from herdwatch.core.types import Alert

logger = structlog.get_logger(__name__)


class GateState(StrEnum):
    IDLE = "idle"
    INTERRUPTING = "interrupting"


class NotificationGate:
    """Two-state machine: Idle and Interrupting.

    - A High-severity alert moves the gate to Interrupting with that alert
      active. A newer High alert before acknowledgement replaces it
      (last write wins, nothing is queued).
    - Any other severity leaves the gate untouched.
    - ``acknowledge()`` is the only way back to Idle. Clearing the active
      alert never removes it from the ledger.
    """

    def __init__(self) -> None:
        self._active: Alert | None = None
        self._interrupts = 0

    @property
    def active_alert(self) -> Alert | None:
        return self._active

    @property
    def state(self) -> GateState:
        return GateState.IDLE if self._active is None else GateState.INTERRUPTING

    @property
    def interrupting(self) -> bool:
        return self._active is not None

    @property
    def interrupts(self) -> int:
        """Number of alerts that have interrupted so far."""
        return self._interrupts

    def observe(self, alert: Alert) -> bool:
        """Feed a newly appended alert. Returns True if it interrupted."""
        if not alert.is_high:
            return False

        replaced = self._active
        self._active = alert
        self._interrupts += 1
        logger.info(
            "alert_interrupt",
            alert_id=alert.id,
            device_id=alert.device_id,
            replaced=replaced.id if replaced is not None else None,
        )
        return True

    def acknowledge(self) -> Alert | None:
        """Dismiss the active alert. Returns it, or None if already idle."""
        cleared, self._active = self._active, None
        if cleared is not None:
            logger.info("alert_acknowledged", alert_id=cleared.id)
        return cleared
