"""LibreLinkUp wire schemas and canonical glucose domain values.

Wire models mirror the backend's JSON (camelCase aliases, unknown keys
ignored). Fields the backend sends inconsistently are Optional rather
than untyped, so a missing block reads as None instead of failing the
whole payload.

Domain values (GlucoseMeasurement, CanonicalMetric) are immutable and
produced fresh on every poll cycle.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Backend date strings, e.g. "8/29/2022 5:45:13 AM"
_LLU_DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"


def parse_llu_date(value: Any) -> datetime | None:
    """Parse a backend timestamp string into a naive datetime. None passthrough."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.strptime(str(value), _LLU_DATE_FORMAT)


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ── Login ────────────────────────────────────────────────────────


class AuthTicket(WireModel):
    token: str = ""
    expires: int | None = None
    duration: int | None = None


class LoginUser(WireModel):
    id: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    country: str = ""
    uom: str | None = None


class LoginData(WireModel):
    user: LoginUser | None = None
    auth_ticket: AuthTicket | None = Field(None, alias="authTicket")
    invitations: list[Any] | None = None


class LoginResponse(WireModel):
    status: int
    data: LoginData | None = None


# ── Connections / graph ──────────────────────────────────────────


class Sensor(WireModel):
    device_id: str = Field("", alias="deviceId")
    sn: str = ""
    a: int = 0  # activation, Unix epoch seconds
    w: int | None = None
    pt: int | None = None
    s: bool | None = None
    lj: bool | None = None


class GlucoseItem(WireModel):
    factory_timestamp: datetime | None = Field(None, alias="FactoryTimestamp")
    timestamp: datetime | None = Field(None, alias="Timestamp")
    type: int | None = None
    value_in_mg_per_dl: int = Field(alias="ValueInMgPerDl")
    trend_arrow: int | None = Field(None, alias="TrendArrow")
    trend_message: str | int | None = Field(None, alias="TrendMessage")
    measurement_color: int | None = Field(None, alias="MeasurementColor")
    glucose_units: int | None = Field(None, alias="GlucoseUnits")
    value: float | None = Field(None, alias="Value")
    is_high: bool = Field(False, alias="isHigh")
    is_low: bool = Field(False, alias="isLow")

    @field_validator("factory_timestamp", "timestamp", mode="before")
    @classmethod
    def parse_timestamps(cls, v: Any) -> datetime | None:
        return parse_llu_date(v)


class PatientConnection(WireModel):
    """One monitored patient reachable by the authenticated account."""

    id: str = ""
    patient_id: str = Field(alias="patientId")
    country: str = ""
    status: int | None = None
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    target_low: int | None = Field(None, alias="targetLow")
    target_high: int | None = Field(None, alias="targetHigh")
    uom: int | None = None
    sensor: Sensor | None = None
    alarm_rules: dict[str, Any] | None = Field(None, alias="alarmRules")
    glucose_measurement: GlucoseItem | None = Field(None, alias="glucoseMeasurement")
    glucose_item: GlucoseItem | None = Field(None, alias="glucoseItem")
    glucose_alarm: dict[str, Any] | None = Field(None, alias="glucoseAlarm")
    patient_device: dict[str, Any] | None = Field(None, alias="patientDevice")
    created: int | None = None


class ConnectionsResponse(WireModel):
    status: int = 0
    data: list[PatientConnection] = Field(default_factory=list)


class ActiveSensor(WireModel):
    sensor: Sensor | None = None
    device: dict[str, Any] | None = None


class GraphData(WireModel):
    connection: PatientConnection
    active_sensors: list[ActiveSensor] = Field(default_factory=list, alias="activeSensors")
    graph_data: list[GlucoseItem] = Field(default_factory=list, alias="graphData")


class GraphResponse(WireModel):
    status: int = 0
    data: GraphData


# ── Domain values ────────────────────────────────────────────────


@dataclass(frozen=True)
class GlucoseMeasurement:
    """Latest reading for one patient, as read from the graph endpoint."""

    patient_id: str
    value_mg_per_dl: int
    sensor_serial: str
    epoch_seconds: int


@dataclass(frozen=True)
class CanonicalMetric:
    name: str
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, Any] = field(default_factory=dict)
