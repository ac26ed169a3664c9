"""LibreLinkUp graph → canonical glucose metric mapper.

Inbound anti-corruption layer: picks the current reading out of the graph
payload and converts it into the metric shape the output sink expects.

Conversion policy:
- mg_dl is passed through unchanged
- mmol_l = mg_dl * 0.0555 in single precision (float32)
- timestamp is the sensor's `a` field read as Unix epoch seconds, rendered
  in UTC as "YYYY-MM-DD HH:MM:SS +0000 UTC"
"""

from datetime import UTC, datetime

import numpy as np

from shared.exceptions import DecodeError
from librelinkup.domain.models import CanonicalMetric, GlucoseMeasurement, GraphResponse

METRIC_NAME = "librelinkup"
MMOL_PER_MG = np.float32(0.0555)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z %Z"


def _mg_to_mmol(mg_dl: int) -> np.float32:
    return np.float32(mg_dl) * MMOL_PER_MG


def _format_epoch(epoch_seconds: int) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=UTC).strftime(_TIMESTAMP_FORMAT)


def measurement_from_graph(graph: GraphResponse, patient_id: str = "") -> GlucoseMeasurement:
    """Extract the current reading from a graph response.

    Raises DecodeError when the sensor or current measurement is missing,
    so that no partially tagged metric is ever produced.
    """
    connection = graph.data.connection
    if connection.sensor is None:
        raise DecodeError("graph", "connection has no sensor")
    if connection.glucose_measurement is None:
        raise DecodeError("graph", "connection has no glucoseMeasurement")

    return GlucoseMeasurement(
        patient_id=connection.patient_id or patient_id,
        value_mg_per_dl=connection.glucose_measurement.value_in_mg_per_dl,
        sensor_serial=connection.sensor.sn,
        epoch_seconds=connection.sensor.a,
    )


def map_measurement(raw: GlucoseMeasurement) -> CanonicalMetric:
    return CanonicalMetric(
        name=METRIC_NAME,
        tags={
            "patient_id": raw.patient_id,
            "sensor_sn": raw.sensor_serial,
        },
        fields={
            "mg_dl": raw.value_mg_per_dl,
            "mmol_l": _mg_to_mmol(raw.value_mg_per_dl),
            "timestamp": _format_epoch(raw.epoch_seconds),
        },
    )
