#!/usr/bin/env python3
"""
Chart Exporter

Writes a rendered matplotlib figure to a raster image with fixed size,
resolution and background.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

import matplotlib.pyplot as plt
from matplotlib.backend_bases import FigureCanvasBase
from matplotlib.figure import Figure

from funding_chart.errors import WriteError

LOGGER = logging.getLogger(__name__)

DEFAULT_DPI = 400
DEFAULT_SIZE_IN = (12.0, 6.0)
DEFAULT_BACKGROUND = "#FFFFFF"


class ChartExporter:
    """
    Exports a figure to PNG.

    The image is written next to the destination under a temporary name and
    moved into place, so a failed export leaves no file behind.
    """

    def __init__(self,
                 output_path: Path,
                 dpi: int = DEFAULT_DPI,
                 size: Tuple[float, float] = DEFAULT_SIZE_IN,
                 background: str = DEFAULT_BACKGROUND,
                 create_dirs: bool = False):
        """
        Initialize chart exporter.

        Args:
            output_path: Destination image path
            dpi: Resolution in dots per inch
            size: (width, height) in inches
            background: Figure background colour
            create_dirs: Create the parent directory if it is missing
        """
        self.output_path = Path(output_path)
        self.dpi = int(dpi)
        self.size = (float(size[0]), float(size[1]))
        self.background = background
        self.create_dirs = create_dirs

    @property
    def pixel_size(self) -> Tuple[int, int]:
        """Expected (width, height) of the written image in pixels."""
        return (int(round(self.size[0] * self.dpi)),
                int(round(self.size[1] * self.dpi)))

    def _check_destination(self, fmt: str) -> None:
        if fmt not in FigureCanvasBase.get_supported_filetypes():
            raise WriteError(self.output_path, f"unsupported image format: .{fmt}")
        parent = self.output_path.parent
        if not parent.exists():
            if not self.create_dirs:
                raise WriteError(self.output_path, f"directory does not exist: {parent}")
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise WriteError(self.output_path, str(e)) from e
        if not parent.is_dir():
            raise WriteError(self.output_path, f"not a directory: {parent}")
        if not os.access(parent, os.W_OK):
            raise WriteError(self.output_path, f"directory not writable: {parent}")

    def export(self, fig: Figure) -> Path:
        """
        Write ``fig`` and close it.

        Args:
            fig: Rendered figure

        Returns:
            Path to the written image

        Raises:
            WriteError: Destination or format unusable, or the write failed
        """
        LOGGER.info("  Exporting chart to: %s", self.output_path)
        tmp_path = self.output_path.with_name(f".{self.output_path.name}.tmp")
        fmt = self.output_path.suffix.lstrip(".").lower() or "png"

        try:
            self._check_destination(fmt)
            fig.set_size_inches(*self.size)
            try:
                fig.savefig(tmp_path, dpi=self.dpi, format=fmt,
                            facecolor=self.background, edgecolor=self.background)
                os.replace(tmp_path, self.output_path)
            except (OSError, ValueError) as e:
                raise WriteError(self.output_path, str(e)) from e
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()
        finally:
            plt.close(fig)

        size_kb = self.output_path.stat().st_size / 1024
        w, h = self.pixel_size
        LOGGER.info("[OK] Exported: %s (%dx%d px, %.1f KB)",
                    self.output_path.name, w, h, size_kb)
        return self.output_path
