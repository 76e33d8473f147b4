"""
ffchain core module

Host command, filter-graph serialisation and FFmpeg process execution.
"""

from .command import FFmpegCommand
from .filtergraph import FilterDescriptor, Raw, format_chain, format_filter, format_graph
from .process_manager import ProcessManager, ProcessResult, ProgressInfo

__all__ = [
    "FFmpegCommand",
    "FilterDescriptor",
    "Raw",
    "format_chain",
    "format_filter",
    "format_graph",
    "ProcessManager",
    "ProcessResult",
    "ProgressInfo",
]
