"""Layout constants for the timeline preview image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class TimelineLayout:
    """Pixel metrics of the preview canvas."""

    canvas_width: int = 1400
    canvas_height: int = 720
    padding: int = 24
    header_height: int = 96
    column_header_height: int = 40
    row_label_width: int = 200
    row_height: int = 56
    bar_inset: int = 10
    bar_corner_radius: int = 6
    summary_width: int = 300
    summary_gap: int = 24
    grid_line_thickness: int = 1
    cursor_line_thickness: int = 2
    cursor_handle_radius: int = 6
    summary_line_height: int = 44

    @property
    def track_left(self) -> int:
        return self.padding + self.row_label_width

    @property
    def track_right(self) -> int:
        return self.canvas_width - self.padding - self.summary_width - self.summary_gap

    @property
    def track_width(self) -> int:
        return self.track_right - self.track_left

    @property
    def grid_top(self) -> int:
        return self.header_height

    @property
    def rows_top(self) -> int:
        return self.grid_top + self.column_header_height

    @property
    def summary_left(self) -> int:
        return self.track_right + self.summary_gap

    def row_top(self, index: int) -> int:
        return self.rows_top + index * self.row_height

    def grid_bottom(self, row_count: int) -> int:
        return min(self.row_top(row_count), self.canvas_height - self.padding)

    def x_for_fraction(self, fraction: float) -> float:
        """Horizontal position of a window fraction, clamped to the track."""

        clamped = max(0.0, min(fraction, 1.0))
        return self.track_left + clamped * self.track_width


DEFAULT_LAYOUT: Final[TimelineLayout] = TimelineLayout()

__all__ = ["DEFAULT_LAYOUT", "TimelineLayout"]
