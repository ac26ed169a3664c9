"""Patient connection disambiguation.

An account can follow several patients. The policy, in order:
- no connection at all is an upstream data error
- a single connection is used unconditionally
- with several, the configured patient id must be set and must match one
"""

from collections.abc import Sequence

from shared.exceptions import ConfigurationError, UpstreamEmptyError
from librelinkup.domain.models import PatientConnection


def _describe(connections: Sequence[PatientConnection]) -> str:
    return "".join(
        f" - {c.patient_id}: {c.first_name} {c.last_name}\n" for c in connections
    )


def resolve_patient_id(
    connections: Sequence[PatientConnection], configured_patient_id: str | None = None
) -> str:
    """Pick the patient id to poll from the live connection list."""
    if not connections:
        raise UpstreamEmptyError()

    if len(connections) == 1:
        return connections[0].patient_id

    if not configured_patient_id:
        raise ConfigurationError(
            "more than one patient-id was found:\n"
            + _describe(connections)
            + " please set a patient_id in the config"
        )

    for connection in connections:
        if connection.patient_id == configured_patient_id:
            return connection.patient_id

    raise ConfigurationError("the specified patient-id was not found")
