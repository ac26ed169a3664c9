"""LibreLinkUp collector: init once, then gather on an external schedule.

Poll cycle:
1. Fetch the live connection list (authenticated)
2. Resolve the patient id to poll
3. Fetch that patient's graph (authenticated)
4. Map the current reading to the canonical metric
5. Emit it to the accumulator

Every cycle starts from scratch; nothing but the session outlives it.
A failing cycle raises and emits nothing.
"""

import httpx
import structlog

from shared.config import Settings
from shared.exceptions import CollectorError, ConfigurationError
from shared.metrics import gather_cycles_total
from librelinkup.adapters.factory import register_input
from librelinkup.adapters.http_client import LibreLinkUpClient
from librelinkup.adapters.mapper import METRIC_NAME, map_measurement, measurement_from_graph
from librelinkup.adapters.protocol import Accumulator
from librelinkup.adapters.regions import available_regions, resolve_region
from librelinkup.domain.connections import resolve_patient_id
from librelinkup.domain.models import CanonicalMetric

logger = structlog.get_logger()

SAMPLE_CONFIG = """\
# Read the latest glucose value from the LibreLinkUp backend
# LibreLinkUp account credentials
LLU_EMAIL=user@example.com
LLU_PASSWORD=secret

# Region the account lives in: US, EU, DE, FR, JP, AP, AU or AE
LLU_REGION=EU

# Required only when the account follows more than one patient
# LLU_PATIENT_ID=

# Client identification sent to the backend
# LLU_VERSION=4.2.2
# LLU_PRODUCT=llu.ios

# Seconds between two poll cycles
# LLU_POLL_INTERVAL_SECONDS=60
"""


class LibreLinkUpCollector:
    """Polls the current glucose reading of one patient."""

    name = METRIC_NAME

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport
        self._client: LibreLinkUpClient | None = None

    def sample_config(self) -> str:
        return SAMPLE_CONFIG

    def _base_url(self) -> str:
        base_url = self._settings.api_url or resolve_region(self._settings.region)
        if not base_url:
            raise ConfigurationError(
                f"unknown region '{self._settings.region}'. "
                f"Must be one of: {', '.join(available_regions())}"
            )
        return base_url

    def _get_client(self) -> LibreLinkUpClient:
        if self._client is None:
            self._client = LibreLinkUpClient(self._base_url(), self._settings, self._transport)
        return self._client

    def init(self) -> None:
        """Resolve the regional origin and log in. Failures are fatal to startup."""
        client = self._get_client()
        logger.info("collector_initializing", base_url=client.base_url)
        client.login()

    def collect(self) -> CanonicalMetric:
        """Run one poll cycle and return the metric without emitting it."""
        client = self._get_client()
        connections = client.get_connections()
        patient_id = resolve_patient_id(connections, self._settings.patient_id)
        graph = client.get_graph(patient_id)
        return map_measurement(measurement_from_graph(graph, patient_id))

    def gather(self, acc: Accumulator) -> None:
        try:
            metric = self.collect()
        except CollectorError as exc:
            gather_cycles_total.labels(status="failed").inc()
            logger.warning(
                "gather_failed",
                error_type=type(exc).__name__,
                title=exc.title,
                detail=exc.detail,
            )
            raise

        acc.add_fields(metric.name, metric.fields, metric.tags)
        gather_cycles_total.labels(status="succeeded").inc()
        logger.info(
            "gather_succeeded",
            patient_id=metric.tags["patient_id"],
            mg_dl=metric.fields["mg_dl"],
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


register_input(METRIC_NAME, LibreLinkUpCollector)
