"""Collector runner: a minimal scheduler and a logging sink.

Wires together: settings, logging, metrics endpoint, the registered
LibreLinkUp input. Init failures stop the process; gather failures are
logged and the next cycle starts fresh. The input is closed on every exit.
"""

import sys
import time
from typing import Any

import structlog

from shared.config import Settings
from shared.exceptions import CollectorError
from shared.logging import configure_logging
from shared.metrics import serve_metrics
from librelinkup.adapters.factory import get_input
from librelinkup.adapters.protocol import Input
from librelinkup.collector import METRIC_NAME

logger = structlog.get_logger()


class LogAccumulator:
    """Writes every emitted metric as one structured log event.

    Tags and fields stay nested so that no metric key can collide with
    the keys the log pipeline adds (level, timestamp).
    """

    def __init__(self, log: Any = None) -> None:
        self._log = log or structlog.get_logger()

    def add_fields(self, measurement: str, fields: dict[str, Any], tags: dict[str, str]) -> None:
        self._log.info(
            "metric",
            measurement=measurement,
            tags=dict(tags),
            fields={k: float(v) if k == "mmol_l" else v for k, v in fields.items()},
        )


def run_cycles(collector: Input, acc: Any, interval: float, cycles: int | None = None) -> int:
    """Gather until `cycles` have run (forever when None). Returns failed cycle count."""
    failures = 0
    done = 0
    while cycles is None or done < cycles:
        try:
            collector.gather(acc)
        except CollectorError:
            failures += 1
        done += 1
        if cycles is None or done < cycles:
            time.sleep(interval)
    return failures


def main() -> int:
    settings = Settings()
    configure_logging(json_output=settings.log_json)
    logger.info("collector_starting", region=settings.region)

    if settings.metrics_port:
        serve_metrics(settings.metrics_port)

    collector = get_input(METRIC_NAME, settings)
    try:
        try:
            collector.init()
        except CollectorError as exc:
            logger.error(
                "collector_init_failed",
                error_type=type(exc).__name__,
                title=exc.title,
                detail=exc.detail,
            )
            return 1

        try:
            run_cycles(collector, LogAccumulator(), settings.poll_interval_seconds)
        except KeyboardInterrupt:
            logger.info("collector_stopping")
        return 0
    finally:
        collector.close()


if __name__ == "__main__":
    sys.exit(main())
