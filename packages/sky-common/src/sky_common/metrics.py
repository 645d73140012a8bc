"""
Prometheus metrics for SkySentinel.

Shared metric definitions used by the alerts service: message outcome
counters, forwarded-alert counters per primary threat kind, delivery
failures per channel, and verifier fail-open events.
"""

from __future__ import annotations

from prometheus_client import Counter

messages_processed_total = Counter(
    "messages_processed_total",
    "Channel messages run through the alert filter",
    ["outcome"],
)
alerts_forwarded_total = Counter(
    "alerts_forwarded_total",
    "Alerts forwarded by the filter, by primary threat kind",
    ["primary"],
)
alert_delivery_errors_total = Counter(
    "alert_delivery_errors_total",
    "Alert delivery failures",
    ["channel"],
)
verifier_failures_total = Counter(
    "verifier_failures_total",
    "Verifier calls that failed open to the keyword verdict",
    ["reason"],
)
