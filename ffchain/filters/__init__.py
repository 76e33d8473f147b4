"""ffchain filter system.

Filters are described by catalog data (YAML files) and exposed as fluent
builders:

1. Registry: filter definitions and their typed options
2. Builders: one setter per option, ``build()`` hands a descriptor to the host
"""

from .registry import (
    FilterCategory,
    FilterConfigError,
    FilterRegistry,
    FilterSpec,
    OptionSpec,
    OptionType,
    UnknownFilterError,
    get_registry,
    reset_registry,
)
from .builder import FilterBuilder, make_builder_class
from .utils import add_filter, get_filters, register_filter

__all__ = [
    "FilterCategory",
    "FilterConfigError",
    "FilterRegistry",
    "FilterSpec",
    "OptionSpec",
    "OptionType",
    "UnknownFilterError",
    "get_registry",
    "reset_registry",
    "FilterBuilder",
    "make_builder_class",
    "add_filter",
    "get_filters",
    "register_filter",
]
