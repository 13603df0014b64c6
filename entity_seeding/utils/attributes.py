"""Attribute enumeration scoped to the fields an entity actually carries."""

import dataclasses
from typing import Any, List, Tuple


def entity_attributes(entity: Any) -> List[Tuple[str, Any]]:
    """
    Snapshot the public attributes of ``entity`` as (name, value) pairs.

    Dataclass instances are enumerated by their declared fields; other objects
    by their instance ``__dict__`` (or ``__slots__``), skipping private names.
    """
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        names = [f.name for f in dataclasses.fields(entity)]
    elif hasattr(entity, '__dict__'):
        names = list(vars(entity))
    else:
        names = []
        for klass in type(entity).__mro__:
            slots = getattr(klass, '__slots__', ())
            names.extend([slots] if isinstance(slots, str) else slots)

    return [
        (name, getattr(entity, name))
        for name in names
        if not name.startswith('_') and hasattr(entity, name)
    ]
