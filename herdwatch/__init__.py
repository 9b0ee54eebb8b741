"""Elephant-collar tracking dashboard: live alerts, notifications, map overlays."""
