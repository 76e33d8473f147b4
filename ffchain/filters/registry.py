"""Filter registry for managing the FFmpeg filter catalog."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

logger = logging.getLogger("ffchain")


class FilterConfigError(ValueError):
    """Raised when a filter builder holds an invalid option configuration."""

    def __init__(self, filter_name: str, option: Optional[str], reason: str):
        self.filter_name = filter_name
        self.option = option
        self.reason = reason
        if option:
            message = f"{filter_name}: option '{option}': {reason}"
        else:
            message = f"{filter_name}: {reason}"
        super().__init__(message)


class UnknownFilterError(KeyError):
    """Raised when a filter name is not present in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown filter '{self.name}'"


class FilterCategory(str, Enum):
    """Categories of filters, by the media they consume and produce."""
    AUDIO = "audio"
    VIDEO = "video"
    MULTIMEDIA = "multimedia"
    SOURCE = "source"
    SINK = "sink"
    CUSTOM = "custom"


class OptionType(str, Enum):
    """Types of filter options."""
    ANY = "any"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    CHOICE = "choice"
    FLAGS = "flags"
    DURATION = "duration"
    COLOR = "color"
    RATIONAL = "rational"
    IMAGE_SIZE = "image_size"


_SCALARS = (str, int, float, bool)
_BOOL_STRINGS = {"true", "false", "1", "0", "yes", "no", "on", "off"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class OptionSpec:
    """Definition of a filter option."""
    name: str
    type: OptionType = OptionType.ANY
    description: str = ""
    required: bool = False
    default: Any = None
    min_value: float | None = None
    max_value: float | None = None
    choices: list[str] | None = None

    def validate(self, value: Any) -> tuple[bool, Optional[str]]:
        """Validate an option value.

        ``None`` means the option was never set.

        Args:
            value: Value to validate.

        Returns:
            Tuple of (is_valid, error_message).
        """
        if value is None:
            if self.required:
                return False, "is required"
            return True, None

        if self.type == OptionType.ANY:
            return True, None

        if self.type in (OptionType.INT, OptionType.FLOAT):
            if self.type == OptionType.INT and not (
                isinstance(value, int) and not isinstance(value, bool)
            ):
                return False, f"must be an integer, got {value!r}"
            if self.type == OptionType.FLOAT and not _is_number(value):
                return False, f"must be a number, got {value!r}"
            return self._check_range(value)

        if self.type == OptionType.BOOL:
            if isinstance(value, bool) or value in (0, 1):
                return True, None
            if isinstance(value, str) and value.lower() in _BOOL_STRINGS:
                return True, None
            return False, f"must be a boolean, got {value!r}"

        if self.type == OptionType.CHOICE:
            if self.choices and value in self.choices:
                return True, None
            # Named constants also accept their numeric value, within the
            # option's range when it has one
            if _is_number(value):
                return self._check_range(value)
            return False, f"must be one of {self.choices}, got {value!r}"

        if self.type == OptionType.FLAGS:
            if _is_number(value):
                return True, None
            if not isinstance(value, str):
                return False, f"must be a flags string, got {value!r}"
            if self.choices:
                tokens = [t for t in value.replace("-", "+").split("+") if t]
                unknown = [t for t in tokens if t not in self.choices]
                if unknown:
                    return False, f"unknown flag(s) {unknown}, expected {self.choices}"
            return True, None

        if self.type == OptionType.DURATION:
            if _is_number(value):
                if self.min_value is not None or self.max_value is not None:
                    return self._check_range(value)
                return True, None
            if isinstance(value, str) and value:
                return True, None
            return False, f"must be seconds or a duration string, got {value!r}"

        if self.type in (OptionType.COLOR, OptionType.IMAGE_SIZE):
            if not isinstance(value, str):
                return False, f"must be a string, got {value!r}"
            return True, None

        if self.type == OptionType.RATIONAL:
            if _is_number(value) or isinstance(value, str):
                return True, None
            return False, f"must be a number or 'num/den', got {value!r}"

        # STRING options carry expressions as often as literals
        if not isinstance(value, _SCALARS):
            return False, f"must be a string or number, got {value!r}"
        return True, None

    def _check_range(self, value: float) -> tuple[bool, Optional[str]]:
        if self.min_value is not None and value < self.min_value:
            return False, f"must be >= {self.min_value}"
        if self.max_value is not None and value > self.max_value:
            return False, f"must be <= {self.max_value}"
        return True, None


@dataclass
class FilterSpec:
    """Definition of an FFmpeg filter and its options."""
    name: str
    category: FilterCategory = FilterCategory.VIDEO
    description: str = ""
    options: list[OptionSpec] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    _search_text: str = field(init=False, repr=False, default="")

    def __post_init__(self):
        """Pre-compute search text for faster lookups."""
        parts = [self.name, self.description] + [o.name for o in self.options]
        self._search_text = " ".join(parts).lower()

    def get_option(self, name: str) -> Optional[OptionSpec]:
        """Get an option definition by name."""
        for option in self.options:
            if option.name == name:
                return option
        return None

    @property
    def option_names(self) -> list[str]:
        return [o.name for o in self.options]


class FilterRegistry:
    """Central registry for all known filters."""

    def __init__(self):
        self._filters: dict[str, FilterSpec] = {}
        self._aliases: dict[str, str] = {}
        self._by_category: dict[FilterCategory, list[str]] = {
            cat: [] for cat in FilterCategory
        }
        self._builder_classes: dict[str, type] = {}

    def register(self, spec: FilterSpec) -> None:
        """Register a filter, replacing any previous definition of that name.

        Args:
            spec: Filter to register.
        """
        previous = self._filters.get(spec.name)
        if previous is not None:
            logger.debug("Replacing filter definition '%s'", spec.name)
            self._by_category[previous.category].remove(spec.name)

        self._filters[spec.name] = spec
        self._by_category[spec.category].append(spec.name)
        for alias in spec.aliases:
            self._aliases[alias] = spec.name

        self._builder_classes.pop(spec.name, None)

    def register_alias(self, alias: str, name: str) -> None:
        """Make ``alias`` resolve to the filter ``name``."""
        self._aliases[alias] = name

    def resolve(self, name: str) -> str:
        """Resolve an alias to its canonical filter name."""
        if name in self._filters:
            return name
        return self._aliases.get(name, name)

    def get(self, name: str) -> Optional[FilterSpec]:
        """Get a filter by name or alias.

        Args:
            name: Filter name.

        Returns:
            FilterSpec if found, None otherwise.
        """
        return self._filters.get(self.resolve(name))

    def require(self, name: str) -> FilterSpec:
        """Get a filter by name or alias, raising if it is unknown."""
        spec = self.get(name)
        if spec is None:
            raise UnknownFilterError(name)
        return spec

    def names(self) -> list[str]:
        return list(self._filters)

    def list_all(self) -> list[FilterSpec]:
        """List all registered filters."""
        return list(self._filters.values())

    def list_by_category(self, category: FilterCategory) -> list[FilterSpec]:
        """List filters in a category.

        Args:
            category: Category to filter by.

        Returns:
            List of filters in the category.
        """
        return [self._filters[name] for name in self._by_category.get(category, [])]

    def search(self, query: str) -> list[FilterSpec]:
        """Search for filters by name, description or option name.

        Args:
            query: Search query.

        Returns:
            List of matching filters.
        """
        query = query.lower()
        return [
            spec for spec in self._filters.values()
            if query in spec._search_text
        ]

    def builder_class(self, name: str) -> type:
        """Return the builder class for a filter, creating it on first use."""
        from .builder import make_builder_class

        spec = self.require(name)
        cls = self._builder_classes.get(spec.name)
        if cls is None:
            cls = make_builder_class(spec)
            self._builder_classes[spec.name] = cls
        return cls

    def create_builder(self, name: str, host: Any, strict: Optional[bool] = None):
        """Create a fresh builder for ``name`` bound to ``host``."""
        return self.builder_class(name)(host, strict=strict)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[FilterSpec]:
        return iter(list(self._filters.values()))


# Global registry instance
_registry: Optional[FilterRegistry] = None


def get_registry() -> FilterRegistry:
    """Get the global filter registry.

    The registry is populated from the bundled catalog and from every
    directory listed in ``catalog.dirs`` of the active configuration.

    Returns:
        Global FilterRegistry instance.
    """
    global _registry
    if _registry is None:
        _registry = FilterRegistry()
        _register_default_filters(_registry)
    return _registry


def reset_registry() -> None:
    """Drop the global registry so the next access reloads the catalog."""
    global _registry
    _registry = None


def _register_default_filters(registry: FilterRegistry) -> None:
    """Register the bundled catalog and any configured catalog directories."""
    from ..config import get_config
    from .yaml_loader import load_bundled_catalog, load_catalog_dir

    load_bundled_catalog(registry)
    for directory in get_config().catalog.dirs:
        load_catalog_dir(directory, registry)
