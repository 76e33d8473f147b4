"""Filter descriptors and their FFmpeg filter-graph serialisation.

FFmpeg parses a filter graph in two passes, so option values are escaped
twice: once for the option list of a single filter (``:`` separates
options) and once for the graph (``,`` separates filters in a chain,
``;`` separates chains, ``[...]`` delimits pad labels).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

OPTION_SPECIAL_CHARS = "\\':"
GRAPH_SPECIAL_CHARS = "\\'[],;"


class Raw(str):
    """A value inserted into the filter graph without escaping.

    Use it for values that are already quoted or escaped by the caller,
    e.g. ``Raw("'between(t,1,2)'")``.
    """


def _escape(text: str, special: str) -> str:
    # Fast path for the common case of plain values
    if not any(ch in text for ch in special):
        return text
    return "".join("\\" + ch if ch in special else ch for ch in text)


def format_value(value: Any) -> str:
    """Render one option value as filter-graph text.

    Booleans become ``1``/``0`` and sequences are joined with ``|``, the
    list separator FFmpeg filters use (e.g. ``aformat`` sample rates).
    """
    if isinstance(value, Raw):
        return str(value)
    return _escape(_escape(_text(value), OPTION_SPECIAL_CHARS), GRAPH_SPECIAL_CHARS)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple)):
        return "|".join(_text(v) for v in value)
    return str(value)


def _label(pad: str) -> str:
    return "[" + pad.strip("[]") + "]"


def _as_pads(pads: str | Iterable[str] | None) -> tuple[str, ...]:
    if pads is None:
        return ()
    if isinstance(pads, str):
        return (pads,)
    return tuple(pads)


@dataclass(frozen=True)
class FilterDescriptor:
    """A configured filter ready to be placed in a filter graph.

    Fields
    ------
    filter : str
        FFmpeg filter name (e.g. ``"fade"``).
    options : Mapping[str, Any]
        Read-only option map, in the order options were first set.
    inputs : tuple[str, ...]
        Input pad labels, used in complex filter graphs.
    outputs : tuple[str, ...]
        Output pad labels, used in complex filter graphs.
    """

    filter: str
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        object.__setattr__(self, "inputs", _as_pads(self.inputs))
        object.__setattr__(self, "outputs", _as_pads(self.outputs))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FilterDescriptor":
        """Create a descriptor from a ``{"filter": ..., "options": ...}`` mapping."""
        return cls(
            filter=data.get("filter", ""),
            options=data.get("options") or {},
            inputs=data.get("inputs") or (),
            outputs=data.get("outputs") or (),
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form of the descriptor."""
        data: dict[str, Any] = {"filter": self.filter, "options": dict(self.options)}
        if self.inputs:
            data["inputs"] = list(self.inputs)
        if self.outputs:
            data["outputs"] = list(self.outputs)
        return data

    def to_string(self) -> str:
        """Convert the descriptor to an FFmpeg filter string."""
        return format_filter(self)


def format_filter(descriptor: FilterDescriptor) -> str:
    """Convert one descriptor to ``[in]name=k=v:k=v[out]``."""
    parts = [_label(pad) for pad in descriptor.inputs]

    if descriptor.options:
        option_str = ":".join(
            f"{key}={format_value(value)}"
            for key, value in descriptor.options.items()
        )
        parts.append(f"{descriptor.filter}={option_str}")
    else:
        parts.append(descriptor.filter)

    parts.extend(_label(pad) for pad in descriptor.outputs)
    return "".join(parts)


def format_chain(descriptors: Sequence[FilterDescriptor]) -> str:
    """Join descriptors into a linear filter chain (``-vf``/``-af``)."""
    return ",".join(format_filter(d) for d in descriptors)


def format_graph(descriptors: Sequence[FilterDescriptor]) -> str:
    """Join descriptors into a complex filter graph (``-filter_complex``)."""
    return ";".join(format_filter(d) for d in descriptors)
