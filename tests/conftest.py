"""Pytest configuration for ffchain tests.

Every test starts from a clean configuration and global registry, with
no ``FFCHAIN_*`` environment variables leaking in from the shell.
"""

import pytest

from ffchain import config as config_module
from ffchain.core.command import FFmpegCommand
from ffchain.filters import registry as registry_module
from ffchain.filters.registry import (
    FilterCategory,
    FilterRegistry,
    FilterSpec,
    OptionSpec,
    OptionType,
)

_ENV_VARS = (
    "FFCHAIN_CONFIG",
    "FFCHAIN_FFMPEG_PATH",
    "FFCHAIN_FFMPEG_TIMEOUT",
    "FFCHAIN_CATALOG_DIRS",
    "FFCHAIN_STRICT",
)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch, tmp_path):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Keep a stray ffchain.yaml in the working directory out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.setattr(registry_module, "_registry", None)


@pytest.fixture
def registry():
    """A small hand-built registry, independent of the bundled catalog."""
    reg = FilterRegistry()
    reg.register(FilterSpec(
        name="fade",
        category=FilterCategory.VIDEO,
        description="Fade in/out input video",
        options=[
            OptionSpec(name="type", type=OptionType.CHOICE, choices=["in", "out"]),
            OptionSpec(name="start_frame", type=OptionType.INT, min_value=0),
            OptionSpec(name="nb_frames", type=OptionType.INT, min_value=1),
            OptionSpec(name="alpha", type=OptionType.BOOL),
            OptionSpec(name="start_time", type=OptionType.DURATION),
            OptionSpec(name="duration", type=OptionType.DURATION),
            OptionSpec(name="color", type=OptionType.COLOR),
        ],
    ))
    reg.register(FilterSpec(
        name="crop",
        category=FilterCategory.VIDEO,
        description="Crop the input video",
        options=[
            OptionSpec(name="w", type=OptionType.STRING),
            OptionSpec(name="h", type=OptionType.STRING),
            OptionSpec(name="x", type=OptionType.STRING),
            OptionSpec(name="y", type=OptionType.STRING),
            OptionSpec(name="keep_aspect", type=OptionType.BOOL),
            OptionSpec(name="exact", type=OptionType.BOOL),
        ],
    ))
    reg.register(FilterSpec(
        name="volume",
        category=FilterCategory.AUDIO,
        description="Change input volume",
        options=[
            OptionSpec(name="volume", type=OptionType.STRING, required=True),
            OptionSpec(name="precision", type=OptionType.CHOICE,
                       choices=["fixed", "float", "double"]),
        ],
    ))
    reg.register(FilterSpec(
        name="atadenoise",
        category=FilterCategory.VIDEO,
        options=[
            OptionSpec(name="0a"),
            OptionSpec(name="s"),
            OptionSpec(name="in"),
        ],
    ))
    reg.register(FilterSpec(name="hflip", category=FilterCategory.VIDEO))
    return reg


@pytest.fixture
def command(registry):
    return FFmpegCommand(registry=registry)
