"""Parse ``ffmpeg -h filter=NAME`` output into filter definitions.

Typical input::

    Filter fade
      Fade in/out input video.
        Inputs:
           #0: default (video)
        Outputs:
           #0: default (video)
    fade AVOptions:
      type              <int>        ..FV.....T. set the fade direction (from 0 to 1) (default in)
         in              0            ..FV.....T. fade-in
         out             1            ..FV.....T. fade-out
      alpha             <boolean>    ..FV.....T. fade alpha if it is available on the input (default false)

    This filter has support for timeline through the 'enable' option.
"""

import logging
import re
from typing import Any, Optional

from .registry import FilterCategory, FilterSpec, OptionSpec, OptionType

logger = logging.getLogger("ffchain")

_HEADER_RE = re.compile(r"^Filter (\S+)\s*$")
_OPTION_RE = re.compile(r"^\s{1,3}(\S+)\s+<(\w+)>\s+([.A-Za-z]{6,})\s*(.*)$")
_CONSTANT_RE = re.compile(r"^\s{4,}(\S+)\s+(?:(-?[\w.]+)\s+)?([.A-Za-z]{6,})\s*(.*)$")
_RANGE_RE = re.compile(r"\(from (\S+) to (\S+)\)")
_DEFAULT_RE = re.compile(r"\(default (.*?)\)\s*$")
_PAD_RE = re.compile(r"#\d+: .*\((\w+)\)")

# AVOption type names → OptionType
_AV_TYPES: dict[str, OptionType] = {
    "int": OptionType.INT,
    "int64": OptionType.INT,
    "uint64": OptionType.INT,
    "float": OptionType.FLOAT,
    "double": OptionType.FLOAT,
    "boolean": OptionType.BOOL,
    "string": OptionType.STRING,
    "flags": OptionType.FLAGS,
    "duration": OptionType.DURATION,
    "color": OptionType.COLOR,
    "rational": OptionType.RATIONAL,
    "video_rate": OptionType.RATIONAL,
    "image_size": OptionType.IMAGE_SIZE,
    "pix_fmt": OptionType.STRING,
    "sample_fmt": OptionType.STRING,
    "channel_layout": OptionType.STRING,
    "dictionary": OptionType.STRING,
    "binary": OptionType.STRING,
}

# Symbolic range limits printed by FFmpeg mean "unbounded"
_UNBOUNDED = {
    "INT_MIN", "INT_MAX", "I64_MIN", "I64_MAX", "UINT32_MAX", "UINT64_MAX",
    "FLT_MIN", "FLT_MAX", "-FLT_MAX", "DBL_MIN", "DBL_MAX", "-DBL_MAX",
}


def _parse_number(text: str) -> Optional[float]:
    if text in _UNBOUNDED:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


def _parse_default(text: str, otype: OptionType) -> Any:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    if otype == OptionType.BOOL:
        return {"true": True, "false": False}.get(text, text)
    if otype in (OptionType.INT, OptionType.FLOAT):
        number = _parse_number(text)
        return text if number is None else number
    return text


def _category(inputs: list[str], outputs: list[str], no_inputs: bool, no_outputs: bool) -> FilterCategory:
    if no_inputs:
        return FilterCategory.SOURCE
    if no_outputs:
        return FilterCategory.SINK
    kinds = set(inputs) | set(outputs)
    if kinds == {"audio"}:
        return FilterCategory.AUDIO
    if kinds == {"video"}:
        return FilterCategory.VIDEO
    if kinds:
        return FilterCategory.MULTIMEDIA
    return FilterCategory.CUSTOM


def parse_filter_help(text: str) -> Optional[FilterSpec]:
    """Build a :class:`FilterSpec` from the text FFmpeg prints for one filter.

    Returns ``None`` if the text does not describe a filter (e.g. FFmpeg
    answered ``Unknown filter``).
    """
    name: Optional[str] = None
    description = ""
    options: list[OptionSpec] = []
    inputs: list[str] = []
    outputs: list[str] = []
    no_inputs = no_outputs = False
    section = None
    current: Optional[OptionSpec] = None
    current_av_type = ""

    for line in text.splitlines():
        if not line.strip():
            continue

        header = _HEADER_RE.match(line)
        if header:
            name = header.group(1)
            section = "description"
            continue
        if name is None:
            continue

        stripped = line.strip()
        if stripped == "Inputs:":
            section = "inputs"
            continue
        if stripped == "Outputs:":
            section = "outputs"
            continue
        if stripped.endswith("AVOptions:"):
            section = "options"
            continue
        if "support for timeline" in stripped:
            if not any(o.name == "enable" for o in options):
                options.append(OptionSpec(
                    name="enable",
                    type=OptionType.STRING,
                    description="Timeline expression enabling the filter",
                ))
            continue

        if section == "description":
            # First line only; later lines list threading/command support
            if not description:
                description = stripped
        elif section in ("inputs", "outputs"):
            pads = inputs if section == "inputs" else outputs
            if "none" in stripped and "(source filter)" in stripped:
                no_inputs = True
            elif "none" in stripped and "(sink filter)" in stripped:
                no_outputs = True
            else:
                pad = _PAD_RE.search(stripped)
                if pad:
                    pads.append(pad.group(1))
        elif section == "options":
            option_match = _OPTION_RE.match(line)
            if option_match:
                oname, av_type, _flags, rest = option_match.groups()
                current_av_type = av_type
                current = _parse_option(oname, av_type, rest)
                options.append(current)
                continue
            constant_match = _CONSTANT_RE.match(line)
            if constant_match and current is not None:
                _add_constant(current, current_av_type, constant_match.group(1))
                continue
            logger.debug("Unparsed AVOption line in %s: %s", name, stripped)

    if name is None:
        return None

    return FilterSpec(
        name=name,
        category=_category(inputs, outputs, no_inputs, no_outputs),
        description=description,
        options=options,
    )


def _parse_option(name: str, av_type: str, rest: str) -> OptionSpec:
    otype = _AV_TYPES.get(av_type, OptionType.ANY)

    min_value = max_value = default = None
    default_match = _DEFAULT_RE.search(rest)
    if default_match:
        default = _parse_default(default_match.group(1), otype)
        rest = rest[:default_match.start()].rstrip()
    range_match = _RANGE_RE.search(rest)
    if range_match:
        min_value = _parse_number(range_match.group(1))
        max_value = _parse_number(range_match.group(2))
        rest = (rest[:range_match.start()] + rest[range_match.end():]).strip()

    return OptionSpec(
        name=name,
        type=otype,
        description=rest.strip(),
        default=default,
        min_value=min_value,
        max_value=max_value,
    )


def _add_constant(option: OptionSpec, av_type: str, constant: str) -> None:
    """Record a named constant accepted by an option."""
    if option.choices is None:
        option.choices = []
    option.choices.append(constant)
    # Integer and string options with named constants become choices;
    # numeric values stay valid through the option's range.
    if av_type in ("int", "int64", "uint64", "string"):
        option.type = OptionType.CHOICE
