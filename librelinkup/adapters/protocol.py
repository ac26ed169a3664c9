"""Collaborator protocols: the metric sink and the polled input.

The collector depends only on these interfaces, never on a concrete
scheduler or output.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Accumulator(Protocol):
    """Output sink that receives one record per successful poll cycle."""

    def add_fields(self, measurement: str, fields: dict[str, Any], tags: dict[str, str]) -> None:
        """Record one metric.

        Args:
            measurement: Record name (the data source).
            fields: Field values keyed by field name.
            tags: Indexed string tags identifying the series.
        """
        ...


@runtime_checkable
class Input(Protocol):
    """A polled data source driven by an external scheduler."""

    name: str

    def init(self) -> None: ...

    def gather(self, acc: Accumulator) -> None: ...

    def sample_config(self) -> str: ...

    def close(self) -> None: ...
