"""
Required-context validation for factories.

A factory may declare the context keys its ``entity`` hook relies on. Each
entry is either a single key, satisfied when the key is present in the
context, or a group of keys (list, tuple, set or frozenset), satisfied when at
least one of its keys is present. Presence means membership: a key mapped to
``None`` still counts.
"""

from typing import Any, Mapping

from ..types import ContextKey
from .error_handling import MissingContextError

_GROUP_TYPES = (list, tuple, set, frozenset)


def _is_group(entry: Any) -> bool:
    return isinstance(entry, _GROUP_TYPES)


def expect_context(context: Mapping[str, Any], *required_keys: ContextKey) -> None:
    """
    Validate that ``context`` satisfies every required key entry.

    A group is any-of: ``[("tenant_id", "tenant_slug")]`` accepts a context
    carrying either key.

    Args:
        context: Context mapping passed to the factory call
        *required_keys: Single keys or groups of alternative keys

    Raises:
        MissingContextError: naming the first unsatisfied entry
    """
    context = context or {}

    for entry in required_keys:
        if _is_group(entry):
            group = list(entry)
            if not any(key in context for key in group):
                raise MissingContextError(group)
        elif entry not in context:
            raise MissingContextError([entry])

