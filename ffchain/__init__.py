"""ffchain: fluent builders for FFmpeg filter graphs.

    from ffchain import FFmpegCommand

    cmd = FFmpegCommand().input("in.mp4").output("out.mp4")
    cmd.fade().type("in").start_time(2).build()
    cmd.apply_video_filters().to_args()
"""

import logging

from .core import FFmpegCommand, FilterDescriptor, ProcessManager, ProcessResult, Raw
from .filters import (
    FilterBuilder,
    FilterConfigError,
    FilterRegistry,
    FilterSpec,
    UnknownFilterError,
    add_filter,
    get_filters,
    get_registry,
    register_filter,
)

__version__ = "1.0.0"

logging.getLogger("ffchain").addHandler(logging.NullHandler())

__all__ = [
    "FFmpegCommand",
    "FilterDescriptor",
    "ProcessManager",
    "ProcessResult",
    "Raw",
    "FilterBuilder",
    "FilterConfigError",
    "FilterRegistry",
    "FilterSpec",
    "UnknownFilterError",
    "add_filter",
    "get_filters",
    "get_registry",
    "register_filter",
]
