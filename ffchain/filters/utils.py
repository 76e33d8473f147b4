"""Host-side filter bookkeeping.

A *host* is any object representing an in-progress FFmpeg invocation
(normally :class:`ffchain.core.command.FFmpegCommand`). These helpers
attach filter factories to a host and maintain its ordered list of
pending :class:`FilterDescriptor` objects.
"""

import logging
import types
from typing import Any, Callable, Mapping

from ..core.filtergraph import FilterDescriptor

logger = logging.getLogger("ffchain")

# Attribute holding the pending descriptor list on a host
FILTERS_ATTR = "_ffchain_filters"


def register_filter(host: Any, name: str, factory: Callable[[Any], Any]) -> Any:
    """Install ``factory`` as a method called ``name`` on ``host``.

    The method is bound to this host instance only; other instances of the
    same class are not affected. An existing attribute of the same name is
    replaced. Each call of the installed method calls ``factory(host)``
    again, so every call yields an independent builder.

    Returns:
        The host, for chaining.
    """
    if not name:
        raise ValueError("Filter name cannot be empty")
    if not callable(factory):
        raise TypeError(f"Factory for '{name}' is not callable")

    if name in vars(host) or hasattr(type(host), name):
        logger.debug("Overwriting attribute '%s' on %s", name, type(host).__name__)

    setattr(host, name, types.MethodType(factory, host))
    return host


def get_filters(host: Any) -> list[FilterDescriptor]:
    """Return the host's live list of pending descriptors, creating it if needed."""
    filters = getattr(host, FILTERS_ATTR, None)
    if filters is None:
        filters = []
        setattr(host, FILTERS_ATTR, filters)
    return filters


def add_filter(host: Any, descriptor: FilterDescriptor | Mapping[str, Any]) -> None:
    """Append a descriptor to the host's pending filter list.

    Args:
        host: The host command.
        descriptor: A FilterDescriptor, or a mapping with ``filter`` and
            optional ``options``, ``inputs`` and ``outputs`` keys.

    Raises:
        ValueError: If the descriptor has no filter name.
    """
    if host is None:
        raise ValueError("Host cannot be None")
    if descriptor is None:
        raise ValueError("Descriptor cannot be None")

    if not isinstance(descriptor, FilterDescriptor):
        descriptor = FilterDescriptor.from_mapping(descriptor)
    if not descriptor.filter:
        raise ValueError("Descriptor has no filter name")

    get_filters(host).append(descriptor)
