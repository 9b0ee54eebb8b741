"""Append-only alert history, newest first."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

import structlog

from herdwatch.core.types import Alert

logger = structlog.get_logger(__name__)


class AlertLedger:
    """Reverse-chronological alert history.

    ``append`` is the only mutation: new alerts go to the front and nothing
    is ever reordered. With ``max_alerts`` set the oldest entries are evicted
    once the cap is reached; by default the history grows for the whole
    session.
    """

    def __init__(
        self,
        initial: Iterable[Alert] = (),
        max_alerts: int | None = None,
    ) -> None:
        # ``initial`` is newest-first, the same order ``all()`` returns.
        seed = list(initial)
        if max_alerts is not None:
            seed = seed[:max_alerts]
        self._alerts: deque[Alert] = deque(seed, maxlen=max_alerts)
        self._max_alerts = max_alerts
        self._evicted = 0

    @property
    def max_alerts(self) -> int | None:
        return self._max_alerts

    @property
    def evicted(self) -> int:
        return self._evicted

    def append(self, alert: Alert) -> None:
        """Add *alert* as the newest entry."""
        if self._max_alerts is not None and len(self._alerts) == self._max_alerts:
            self._evicted += 1
            logger.debug("ledger_evicted", alert_id=self._alerts[-1].id)
        self._alerts.appendleft(alert)

    def all(self) -> list[Alert]:
        """Snapshot of every alert, newest first."""
        return list(self._alerts)

    def by_device(self, device_id: str) -> list[Alert]:
        """Alerts raised by *device_id*, newest first."""
        return [a for a in self._alerts if a.device_id == device_id]

    def recent(self, n: int) -> list[Alert]:
        """The *n* most recent alerts."""
        if n <= 0:
            return []
        return [a for _, a in zip(range(n), self._alerts)]

    def get(self, alert_id: str) -> Alert | None:
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert
        return None

    def __len__(self) -> int:
        return len(self._alerts)

    def __iter__(self) -> Iterator[Alert]:
        return iter(list(self._alerts))
