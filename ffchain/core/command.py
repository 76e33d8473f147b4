"""FFmpeg host command: inputs, outputs, options and the filter chain."""

import logging
import shlex
from pathlib import Path
from typing import Any, Iterable, Optional

from ..filters.registry import FilterRegistry, UnknownFilterError, get_registry
from ..filters.utils import FILTERS_ATTR, get_filters
from .filtergraph import FilterDescriptor, format_chain, format_graph

logger = logging.getLogger("ffchain")


class FFmpegCommand:
    """Represents a complete FFmpeg command.

    Every filter of the command's registry is available as a factory
    method returning a fresh builder::

        cmd = FFmpegCommand().input("in.mp4").output("out.mp4")
        cmd.fade().type("in").start_time(2).build()
        cmd.crop().w(640).h(360).build()
        cmd.apply_video_filters()
        cmd.to_args()
        # ['ffmpeg', '-y', '-i', 'in.mp4', '-vf',
        #  'fade=type=in:start_time=2,crop=w=640:h=360', 'out.mp4']

    Built filters stay pending until one of the ``apply_*`` methods moves
    them into ``-vf``, ``-af`` or ``-filter_complex``.
    """

    def __init__(self, registry: Optional[FilterRegistry] = None):
        """Initialize the command.

        Args:
            registry: Registry used to resolve filter factories. Defaults
                to the global registry.
        """
        self._registry = registry
        self.inputs: list[str] = []
        self.outputs: list[str] = []
        self.input_opts: dict[str, list[str]] = {}
        self.output_opts: list[str] = []
        self.global_opts: list[str] = []
        self.video_filters: list[FilterDescriptor] = []
        self.audio_filters: list[FilterDescriptor] = []
        self.complex_filters: list[FilterDescriptor] = []
        self.overwrite_output = True
        setattr(self, FILTERS_ATTR, [])

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not regular attributes
        if name.startswith("_"):
            raise AttributeError(name)
        registry = self.registry
        if name not in registry:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute or filter '{name}'"
            )

        def factory(strict: Optional[bool] = None):
            return registry.create_builder(name, self, strict=strict)

        factory.__name__ = name
        return factory

    @property
    def registry(self) -> FilterRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    @property
    def filters(self) -> list[FilterDescriptor]:
        """Pending descriptors, in build order."""
        return get_filters(self)

    def filter(self, name: str, strict: Optional[bool] = None):
        """Return a fresh builder for the filter ``name``.

        Raises:
            UnknownFilterError: If the registry has no such filter.
        """
        if name not in self.registry:
            raise UnknownFilterError(name)
        return self.registry.create_builder(name, self, strict=strict)

    # ── Inputs, outputs and options ───────────────────────────────

    def input(
        self,
        path: str | Path,
        options: Optional[list[str]] = None,
    ) -> "FFmpegCommand":
        """Add an input file."""
        path_str = str(path)
        self.inputs.append(path_str)
        if options:
            self.input_opts.setdefault(path_str, []).extend(options)
        return self

    def input_options(self, path: str | Path, *options: str) -> "FFmpegCommand":
        """Add options to an existing input."""
        self.input_opts.setdefault(str(path), []).extend(options)
        return self

    def output(self, path: str | Path) -> "FFmpegCommand":
        """Add an output file."""
        self.outputs.append(str(path))
        return self

    def output_options(self, *options: str) -> "FFmpegCommand":
        """Add output options."""
        self.output_opts.extend(options)
        return self

    def global_options(self, *options: str) -> "FFmpegCommand":
        """Add global options."""
        self.global_opts.extend(options)
        return self

    def overwrite(self, value: bool = True) -> "FFmpegCommand":
        """Set overwrite flag."""
        self.overwrite_output = value
        return self

    # ── Applying pending filters ──────────────────────────────────

    def _take_pending(self) -> list[FilterDescriptor]:
        pending = get_filters(self)
        taken = list(pending)
        pending.clear()
        return taken

    def apply_video_filters(self) -> "FFmpegCommand":
        """Move all pending filters into the ``-vf`` chain."""
        taken = self._take_pending()
        self.video_filters.extend(taken)
        logger.debug("Applied %d video filter(s)", len(taken))
        return self

    def apply_audio_filters(self) -> "FFmpegCommand":
        """Move all pending filters into the ``-af`` chain."""
        taken = self._take_pending()
        self.audio_filters.extend(taken)
        logger.debug("Applied %d audio filter(s)", len(taken))
        return self

    def apply_complex_filter(self, outputs: Optional[Iterable[str]] = None) -> "FFmpegCommand":
        """Move all pending filters into ``-filter_complex``.

        Args:
            outputs: Output pad labels to select with ``-map``.
        """
        taken = self._take_pending()
        self.complex_filters.extend(taken)
        for label in outputs or ():
            self.output_opts.extend(["-map", "[" + label.strip("[]") + "]"])
        logger.debug("Applied %d complex filter(s)", len(taken))
        return self

    # ── Serialisation ─────────────────────────────────────────────

    def to_args(self) -> list[str]:
        """Convert command to list of arguments for subprocess."""
        args = ["ffmpeg"]

        if self.overwrite_output:
            args.append("-y")
        args.extend(self.global_opts)

        for input_path in self.inputs:
            if input_path in self.input_opts:
                args.extend(self.input_opts[input_path])
            args.extend(["-i", input_path])

        if self.complex_filters:
            args.extend(["-filter_complex", format_graph(self.complex_filters)])
        elif self.video_filters:
            args.extend(["-vf", format_chain(self.video_filters)])

        if self.audio_filters:
            args.extend(["-af", format_chain(self.audio_filters)])

        args.extend(self.output_opts)
        args.extend(self.outputs)
        return args

    def to_string(self) -> str:
        """Convert command to shell string."""
        return " ".join(shlex.quote(arg) for arg in self.to_args())
