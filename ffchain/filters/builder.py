"""Fluent builders for configuring one filter at a time.

Every catalog entry gets its own :class:`FilterBuilder` subclass with one
setter per declared option and an explicit ``with_<option>`` spelling of
each, e.g.::

    cmd.fade().type("in").with_start_time(2).build()

Options whose names are Python keywords get a trailing underscore
(``in_``). Options whose names are not identifiers at all are reachable
through ``with_<option>`` when that is an identifier, and always through
:meth:`FilterBuilder.set`.
"""

import keyword
import logging
import re
from typing import Any, Iterable, Optional

from ..core.filtergraph import FilterDescriptor
from .registry import FilterConfigError, FilterSpec
from .utils import add_filter

logger = logging.getLogger("ffchain")


class FilterBuilder:
    """Accumulates option values for one filter, then hands them to the host.

    Values are stored only when explicitly set, so ``0``, ``False`` and
    ``""`` are kept like any other value. Setting an option to ``None``
    clears it.
    """

    filter_spec: FilterSpec

    def __init__(self, host: Any, strict: Optional[bool] = None):
        """Initialize the builder.

        Args:
            host: The host command that receives the descriptor on build().
            strict: Validate typed options on build(). Defaults to
                ``catalog.strict`` from the active configuration.
        """
        if strict is None:
            from ..config import get_config
            strict = get_config().catalog.strict
        self._host = host
        self._strict = strict
        self._values: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.filter_spec.name} {self._values!r}>"

    def set(self, name: str, value: Any) -> "FilterBuilder":
        """Set an option by name.

        Raises:
            FilterConfigError: If the filter declares no such option.
        """
        if self.filter_spec.get_option(name) is None:
            raise FilterConfigError(self.filter_spec.name, name, "unknown option")
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = value
        return self

    def unset(self, name: str) -> "FilterBuilder":
        """Forget a previously set option."""
        self._values.pop(name, None)
        return self

    def is_set(self, name: str) -> bool:
        return name in self._values

    @property
    def values(self) -> dict[str, Any]:
        """A copy of the explicitly set options."""
        return dict(self._values)

    def validate(self) -> None:
        """Check every declared option against its definition.

        Raises:
            FilterConfigError: For the first option that fails validation.
        """
        for option in self.filter_spec.options:
            is_valid, error = option.validate(self._values.get(option.name))
            if not is_valid:
                raise FilterConfigError(self.filter_spec.name, option.name, error or "invalid")

    def build(
        self,
        inputs: str | Iterable[str] | None = None,
        outputs: str | Iterable[str] | None = None,
    ) -> Any:
        """Create this filter's descriptor and register it on the host.

        Args:
            inputs: Input pad label(s) for complex filter graphs.
            outputs: Output pad label(s) for complex filter graphs.

        Returns:
            The host command, unchanged, for further chaining.
        """
        if self._strict:
            self.validate()

        descriptor = FilterDescriptor(
            filter=self.filter_spec.name,
            options=self._values,
            inputs=inputs,
            outputs=outputs,
        )
        add_filter(self._host, descriptor)
        logger.debug("Built filter %s", descriptor.to_string())
        return self._host


# Names a generated setter must not shadow
RESERVED_NAMES = frozenset(
    name for name in dir(FilterBuilder) if not name.startswith("_")
) | {"filter_spec"}


def setter_name(option_name: str) -> Optional[str]:
    """Method name for an option's plain setter, or None if it has none."""
    if not option_name.isidentifier():
        return None
    if keyword.iskeyword(option_name):
        option_name += "_"
    if option_name in RESERVED_NAMES:
        return None
    return option_name


def _make_setter(option_name: str, method_name: str, doc: str):
    def setter(self, value):
        return self.set(option_name, value)

    setter.__name__ = method_name
    setter.__qualname__ = method_name
    setter.__doc__ = doc or f"Set the '{option_name}' option."
    return setter


def _class_name(filter_name: str) -> str:
    parts = re.split(r"[^0-9A-Za-z]+", filter_name)
    name = "".join(part[:1].upper() + part[1:] for part in parts if part)
    if not name or not name[0].isalpha():
        name = "F" + name
    return name + "Builder"


def make_builder_class(spec: FilterSpec) -> type:
    """Create the FilterBuilder subclass for a filter definition."""
    namespace: dict[str, Any] = {
        "filter_spec": spec,
        "__doc__": spec.description or f"Builder for the '{spec.name}' filter.",
        "__module__": __name__,
    }

    for option in spec.options:
        method = setter_name(option.name)
        if method is not None:
            namespace[method] = _make_setter(option.name, method, option.description)
        else:
            logger.debug("Option '%s' of '%s' has no plain setter", option.name, spec.name)

        alias = f"with_{option.name}"
        if alias.isidentifier() and alias not in RESERVED_NAMES:
            namespace[alias] = _make_setter(option.name, alias, f"Alias for {option.name}().")

    return type(_class_name(spec.name), (FilterBuilder,), namespace)
