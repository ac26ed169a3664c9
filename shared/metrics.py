"""Prometheus metrics for collector observability.

Counters and histograms for vendor calls, re-logins and poll cycles.
Exposed by the runner via an HTTP endpoint when a metrics port is set.
"""

from prometheus_client import Counter, Histogram, start_http_server

# Vendor API
vendor_api_requests_total = Counter(
    "vendor_api_requests_total",
    "Total requests sent to the LibreLinkUp backend",
    ["endpoint", "status_code"],
)

vendor_api_duration_seconds = Histogram(
    "vendor_api_duration_seconds",
    "Duration of LibreLinkUp API calls",
    ["endpoint"],
)

relogin_total = Counter(
    "relogin_total",
    "Forced re-logins after the backend rejected a session",
    ["outcome"],  # outcome: succeeded, failed
)

# Collector
gather_cycles_total = Counter(
    "gather_cycles_total",
    "Total poll cycles run by the collector",
    ["status"],  # status: succeeded, failed
)


def serve_metrics(port: int) -> None:
    """Expose the default registry on /metrics in a daemon thread."""
    start_http_server(port)
