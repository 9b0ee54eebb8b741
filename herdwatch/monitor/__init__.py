"""Live alert history, interruption gate, session state, and web dashboard."""

from herdwatch.monitor.analytics import (
    alerts_to_csv,
    battery_level,
    dashboard_summary,
    severity_distribution,
)
from herdwatch.monitor.exceptions import SessionError, UnknownDeviceError
from herdwatch.monitor.factory import create_live_stack
from herdwatch.monitor.gate import GateState, NotificationGate
from herdwatch.monitor.ledger import AlertLedger
from herdwatch.monitor.session import DashboardSession
from herdwatch.monitor.web_dashboard import create_web_app, start_web_dashboard

__all__ = [
    "AlertLedger",
    "DashboardSession",
    "GateState",
    "NotificationGate",
    "SessionError",
    "UnknownDeviceError",
    "alerts_to_csv",
    "battery_level",
    "create_live_stack",
    "create_web_app",
    "dashboard_summary",
    "severity_distribution",
    "start_web_dashboard",
]
