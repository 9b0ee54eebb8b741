"""Alert feeds — currently the simulated collar event synthesizer."""

from herdwatch.feeds.synthesizer import AlertSynthesizer, sequential_ids

__all__ = [
    "AlertSynthesizer",
    "sequential_ids",
]
