"""Override merge: caller-supplied attribute values applied onto a generated entity."""

from typing import Any, Mapping, Optional

from .error_handling import InvalidOverrideError


def apply_overrides(entity: Any, override_params: Optional[Mapping[str, Any]]) -> Any:
    """
    Assign every override onto ``entity``, replacing what the hooks produced.

    Only attributes the entity declares (on the instance or its class) may be
    overridden. Values are assigned as given; awaitables and factories are
    resolved afterwards together with the rest of the entity.

    Raises:
        InvalidOverrideError: if a key is not an attribute of the entity
    """
    if not override_params:
        return entity

    for key in override_params:
        if not hasattr(entity, key):
            raise InvalidOverrideError(type(entity).__name__, key)

    for key, value in override_params.items():
        setattr(entity, key, value)

    return entity
