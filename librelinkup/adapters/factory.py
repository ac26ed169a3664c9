"""Input registry: maps an input name to a factory building it from settings.

Inputs register themselves on import (see librelinkup.collector).
"""

from collections.abc import Callable

from shared.config import Settings
from librelinkup.adapters.protocol import Input

InputFactory = Callable[[Settings], Input]

_inputs: dict[str, InputFactory] = {}


def register_input(name: str, factory: InputFactory) -> None:
    _inputs[name] = factory


def registered_inputs() -> list[str]:
    return sorted(_inputs)


def get_input(name: str, settings: Settings) -> Input:
    """Build the named input.

    Raises ValueError for a name nothing registered.
    """
    factory = _inputs.get(name)
    if factory is None:
        raise ValueError(f"Unsupported input: {name}. Must be one of: {registered_inputs()}")
    return factory(settings)
