"""YAML filter catalog loader.

A catalog file describes any number of filters::

    filters:
      fade:
        category: video
        description: Fade in/out input video.
        aliases: [vfade]
        options:
          type:
            type: choice
            choices: [in, out]
            description: The effect type.
          start_time:
            type: duration
            description: Timestamp to start the fade at.

The bundled catalog lives in ``ffchain/filters/catalog/``. Extra catalog
directories (``catalog.dirs`` in the configuration) are loaded after it,
so their entries replace bundled filters of the same name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from .registry import (
    FilterCategory,
    FilterRegistry,
    FilterSpec,
    OptionSpec,
    OptionType,
)

logger = logging.getLogger("ffchain")

BUNDLED_CATALOG_DIR = Path(__file__).resolve().parent / "catalog"

# ------------------------------------------------------------------ #
#   YAML → FilterSpec conversion                                     #
# ------------------------------------------------------------------ #

_CATEGORY_MAP: dict[str, FilterCategory] = {cat.value: cat for cat in FilterCategory}

# Map YAML type strings to OptionType enum values.
_TYPE_MAP: dict[str, OptionType] = {
    "any": OptionType.ANY,
    "int": OptionType.INT,
    "integer": OptionType.INT,
    "float": OptionType.FLOAT,
    "number": OptionType.FLOAT,
    "double": OptionType.FLOAT,
    "string": OptionType.STRING,
    "str": OptionType.STRING,
    "bool": OptionType.BOOL,
    "boolean": OptionType.BOOL,
    "choice": OptionType.CHOICE,
    "flags": OptionType.FLAGS,
    "duration": OptionType.DURATION,
    "time": OptionType.DURATION,
    "color": OptionType.COLOR,
    "rational": OptionType.RATIONAL,
    "image_size": OptionType.IMAGE_SIZE,
}


def _parse_option(name: str, data: dict[str, Any]) -> OptionSpec:
    """Convert a YAML option dict into an ``OptionSpec``."""
    type_str = str(data.get("type", "any")).lower()
    otype = _TYPE_MAP.get(type_str)
    if otype is None:
        logger.warning("Unknown option type '%s' for option '%s', using 'any'", type_str, name)
        otype = OptionType.ANY

    choices = data.get("choices")
    if choices is not None:
        choices = [str(c) for c in choices] if isinstance(choices, list) else [str(choices)]

    return OptionSpec(
        name=name,
        type=otype,
        description=str(data.get("description") or ""),
        required=bool(data.get("required", False)),
        default=data.get("default"),
        min_value=data.get("min"),
        max_value=data.get("max"),
        choices=choices,
    )


def parse_filter(name: str, data: dict[str, Any]) -> FilterSpec:
    """Convert one catalog entry into a :class:`FilterSpec`."""
    cat_str = str(data.get("category", "custom")).lower()
    category = _CATEGORY_MAP.get(cat_str, FilterCategory.CUSTOM)

    options: list[OptionSpec] = []
    options_raw = data.get("options") or {}
    if isinstance(options_raw, dict):
        for oname, odata in options_raw.items():
            if not isinstance(oname, str) or not oname:
                logger.warning(
                    "Skipping option key %r of filter '%s': option names must be non-empty strings",
                    oname, name,
                )
                continue
            # Bare option names are allowed: ``options: {w: , h: }``
            options.append(_parse_option(oname, odata if isinstance(odata, dict) else {}))

    aliases = data.get("aliases", [])
    if not isinstance(aliases, list):
        aliases = [str(aliases)]

    return FilterSpec(
        name=str(name),
        category=category,
        description=str(data.get("description") or ""),
        options=options,
        aliases=[str(a) for a in aliases],
    )


def load_catalog_file(path: Path) -> list[FilterSpec]:
    """Parse a catalog YAML file into filter definitions.

    Returns an empty list if the file is unreadable or malformed; invalid
    entries inside an otherwise valid file are skipped.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to read filter catalog %s: %s", path, exc)
        return []

    if not isinstance(data, dict) or not isinstance(data.get("filters"), dict):
        logger.warning("Invalid filter catalog %s: expected a top-level 'filters' mapping", path)
        return []

    specs: list[FilterSpec] = []
    for name, entry in data["filters"].items():
        # Unquoted YAML keys such as null, yes or 1 do not load as strings
        if not isinstance(name, str) or not name:
            logger.warning(
                "Skipping filter key %r in %s: filter names must be non-empty strings (quote the key)",
                name, path,
            )
            continue
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            logger.warning("Skipping filter '%s' in %s: entry must be a mapping", name, path)
            continue
        specs.append(parse_filter(name, entry))
    return specs


# ------------------------------------------------------------------ #
#   Directory scanning                                                #
# ------------------------------------------------------------------ #

def _catalog_files(directory: Path) -> list[Path]:
    return sorted(directory.glob("*.yaml")) + sorted(directory.glob("*.yml"))


def load_catalog_dir(directory: str | Path, registry: FilterRegistry) -> int:
    """Register every filter found in the YAML files of ``directory``.

    Returns the number of filters loaded.
    """
    directory = Path(directory).expanduser()
    if not directory.is_dir():
        logger.warning("Filter catalog directory not found: %s", directory)
        return 0

    total = 0
    for path in _catalog_files(directory):
        for spec in load_catalog_file(path):
            registry.register(spec)
            total += 1
        logger.debug("Loaded filter catalog %s", path)

    if total > 0:
        logger.info("Loaded %d filter(s) from %s", total, directory)
    return total


def load_bundled_catalog(registry: FilterRegistry) -> int:
    """Register the filters shipped with ffchain."""
    return load_catalog_dir(BUNDLED_CATALOG_DIR, registry)


# ------------------------------------------------------------------ #
#   FilterSpec → YAML                                                 #
# ------------------------------------------------------------------ #

def _option_to_dict(option: OptionSpec) -> dict[str, Any]:
    data: dict[str, Any] = {"type": option.type.value}
    if option.description:
        data["description"] = option.description
    if option.required:
        data["required"] = True
    if option.default is not None:
        data["default"] = option.default
    if option.min_value is not None:
        data["min"] = option.min_value
    if option.max_value is not None:
        data["max"] = option.max_value
    if option.choices:
        data["choices"] = list(option.choices)
    return data


def spec_to_dict(spec: FilterSpec) -> dict[str, Any]:
    """Catalog-entry form of a filter definition."""
    data: dict[str, Any] = {"category": spec.category.value}
    if spec.description:
        data["description"] = spec.description
    if spec.aliases:
        data["aliases"] = list(spec.aliases)
    data["options"] = {o.name: _option_to_dict(o) for o in spec.options}
    return data


def dump_catalog(specs: Iterable[FilterSpec], header: Optional[str] = None) -> str:
    """Serialise filter definitions to catalog YAML."""
    body = yaml.safe_dump(
        {"filters": {spec.name: spec_to_dict(spec) for spec in specs}},
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    if header:
        lines = [f"# {line}".rstrip() for line in header.splitlines()]
        return "\n".join(lines) + "\n" + body
    return body
