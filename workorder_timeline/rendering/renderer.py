"""Pillow renderer that turns a :class:`TimelineFrame` into a preview image."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..geometry import BarGeometry, TimelineFrame
from ..models import WorkOrder, WorkOrderStatus
from .layout import DEFAULT_LAYOUT, TimelineLayout

Color = Tuple[int, int, int]


def _font_length(font: ImageFont.ImageFont, text: str) -> float:
    try:
        return font.getlength(text)  # type: ignore[attr-defined]
    except AttributeError:  # pragma: no cover - fallback for older Pillow
        draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        return float(draw.textlength(text, font=font))


def _load_font(path_candidates: Sequence[Path], size: int) -> ImageFont.ImageFont:
    for candidate in path_candidates:
        if candidate.exists():
            return ImageFont.truetype(str(candidate), size=size)
    return ImageFont.load_default()


def _default_font_candidates(bold: bool) -> List[Path]:
    names = ["DejaVuSans-Bold.ttf", "Arial Bold.ttf"] if bold else ["DejaVuSans.ttf", "Arial.ttf"]
    search_dirs = [
        Path("/usr/share/fonts/truetype/dejavu"),
        Path("/usr/share/fonts"),
        Path("/Library/Fonts"),
        Path.home() / ".fonts",
    ]
    return [directory / name for name in names for directory in search_dirs]


def _truncate(text: str, font: ImageFont.ImageFont, max_width: float) -> str:
    if _font_length(font, text) <= max_width:
        return text
    ellipsis = "…"
    current = text
    while current and _font_length(font, current + ellipsis) > max_width:
        current = current[:-1].rstrip()
    return current + ellipsis if current else ""


DEFAULT_STATUS_COLORS: Dict[WorkOrderStatus, Color] = {
    WorkOrderStatus.OPEN: (66, 133, 244),
    WorkOrderStatus.IN_PROGRESS: (142, 106, 232),
    WorkOrderStatus.COMPLETE: (52, 168, 83),
    WorkOrderStatus.BLOCKED: (234, 134, 0),
}


@dataclass
class RendererConfig:
    """Colors, font sizes and font lookup for the preview renderer."""

    layout: TimelineLayout = DEFAULT_LAYOUT
    font_regular_path: Path | None = None
    font_bold_path: Path | None = None
    preview_output_dir: Path | None = None
    background_color: Color = (255, 255, 255)
    foreground_color: Color = (33, 37, 41)
    muted_color: Color = (134, 142, 150)
    grid_color: Color = (222, 226, 230)
    current_period_color: Color = (237, 242, 255)
    cursor_color: Color = (220, 53, 69)
    status_colors: Dict[WorkOrderStatus, Color] = field(default_factory=lambda: dict(DEFAULT_STATUS_COLORS))
    title_font_size: int = 28
    label_font_size: int = 18
    column_font_size: int = 14
    bar_font_size: int = 14

    def __post_init__(self) -> None:
        if self.preview_output_dir is not None:
            self.preview_output_dir = Path(self.preview_output_dir)
            self.preview_output_dir.mkdir(parents=True, exist_ok=True)

    def font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        provided = self.font_bold_path if bold else self.font_regular_path
        candidates = [Path(provided)] if provided is not None else []
        candidates.extend(_default_font_candidates(bold))
        return _load_font(candidates, size)

    def color_for_class(self, status_class: str) -> Color:
        for status, color in self.status_colors.items():
            if status.bar_class == status_class:
                return color
        return self.muted_color


class TimelineRenderer:
    """Draw the Gantt view of a frame: grid, bars, cursor and summary panel."""

    def __init__(self, config: RendererConfig | None = None) -> None:
        self.config = config or RendererConfig()

    def render(
        self,
        frame: TimelineFrame,
        *,
        title: str = "Work Orders",
        preview_name: str | None = None,
    ) -> Image.Image:
        """Render ``frame`` and optionally save it to the preview directory."""

        cfg = self.config
        layout = cfg.layout
        image = Image.new("RGB", (layout.canvas_width, layout.canvas_height), color=cfg.background_color)
        draw = ImageDraw.Draw(image)

        self._draw_header(draw, frame, title)
        self._draw_columns(draw, frame)
        self._draw_rows(draw, frame)
        self._draw_cursor(draw, frame)
        self._draw_summary(draw, frame)

        if cfg.preview_output_dir is not None:
            name = preview_name or datetime.now().strftime("%Y%m%d-%H%M%S")
            image.save(cfg.preview_output_dir / f"{name}.png")

        return image

    # ------------------------------------------------------------------
    def _draw_header(self, draw: ImageDraw.ImageDraw, frame: TimelineFrame, title: str) -> None:
        cfg = self.config
        layout = cfg.layout
        title_font = cfg.font(cfg.title_font_size, bold=True)
        label_font = cfg.font(cfg.label_font_size)

        draw.text((layout.padding, layout.padding), title, font=title_font, fill=cfg.foreground_color)
        subtitle = f"{frame.scale.value} view · {frame.start:%b %d, %Y} – {frame.end:%b %d, %Y}"
        draw.text(
            (layout.padding, layout.padding + cfg.title_font_size + 8),
            subtitle,
            font=label_font,
            fill=cfg.muted_color,
        )

    def _draw_columns(self, draw: ImageDraw.ImageDraw, frame: TimelineFrame) -> None:
        cfg = self.config
        layout = cfg.layout
        font = cfg.font(cfg.column_font_size)
        bottom = layout.grid_bottom(len(frame.rows))

        for column in frame.columns:
            left = layout.x_for_fraction(column.left_percent / 100)
            right = layout.x_for_fraction((column.left_percent + column.width_percent) / 100)
            if column.is_current_period:
                draw.rectangle((left, layout.grid_top, right, bottom), fill=cfg.current_period_color)
            draw.line((left, layout.grid_top, left, bottom), fill=cfg.grid_color, width=layout.grid_line_thickness)
            label = _truncate(column.label, font, right - left - 6)
            if label:
                draw.text((left + 4, layout.grid_top + 10), label, font=font, fill=cfg.muted_color)

        draw.line(
            (layout.padding, layout.rows_top, layout.track_right, layout.rows_top),
            fill=cfg.grid_color,
            width=layout.grid_line_thickness,
        )

    def _draw_rows(self, draw: ImageDraw.ImageDraw, frame: TimelineFrame) -> None:
        cfg = self.config
        layout = cfg.layout
        label_font = cfg.font(cfg.label_font_size)
        bar_font = cfg.font(cfg.bar_font_size, bold=True)

        for index, row in enumerate(frame.rows):
            top = layout.row_top(index)
            if top + layout.row_height > layout.canvas_height - layout.padding:
                break
            name = _truncate(row.work_center.name, label_font, layout.row_label_width - 12)
            draw.text(
                (layout.padding, top + (layout.row_height - cfg.label_font_size) // 2),
                name,
                font=label_font,
                fill=cfg.foreground_color,
            )
            for bar in row.bars:
                self._draw_bar(draw, bar, top, bar_font)
            bottom = top + layout.row_height
            draw.line(
                (layout.padding, bottom, layout.track_right, bottom),
                fill=cfg.grid_color,
                width=layout.grid_line_thickness,
            )

    def _draw_bar(self, draw: ImageDraw.ImageDraw, bar: BarGeometry, row_top: int, font: ImageFont.ImageFont) -> None:
        cfg = self.config
        layout = cfg.layout
        left = layout.x_for_fraction(bar.left_fraction)
        right = layout.x_for_fraction(bar.left_fraction + bar.width_fraction)
        if right - left < 1:
            return
        top = row_top + layout.bar_inset
        bottom = row_top + layout.row_height - layout.bar_inset
        color = cfg.color_for_class(bar.status_class)
        draw.rounded_rectangle(
            (left, top, right, bottom),
            radius=layout.bar_corner_radius,
            fill=None if bar.is_preview else color,
            outline=color,
            width=2,
        )
        label = _truncate(bar.name, font, right - left - 12)
        if label:
            text_color = color if bar.is_preview else cfg.background_color
            draw.text((left + 6, top + (bottom - top - cfg.bar_font_size) // 2), label, font=font, fill=text_color)

    def _draw_cursor(self, draw: ImageDraw.ImageDraw, frame: TimelineFrame) -> None:
        fraction = frame.cursor_fraction
        if fraction is None or fraction < 0 or fraction > 1:
            return
        cfg = self.config
        layout = cfg.layout
        x = layout.x_for_fraction(fraction)
        bottom = layout.grid_bottom(len(frame.rows))
        draw.line((x, layout.grid_top, x, bottom), fill=cfg.cursor_color, width=layout.cursor_line_thickness)
        radius = layout.cursor_handle_radius
        draw.ellipse((x - radius, layout.grid_top - radius, x + radius, layout.grid_top + radius), fill=cfg.cursor_color)

    def _draw_summary(self, draw: ImageDraw.ImageDraw, frame: TimelineFrame) -> None:
        cfg = self.config
        layout = cfg.layout
        heading_font = cfg.font(cfg.label_font_size, bold=True)
        body_font = cfg.font(cfg.column_font_size)
        left = layout.summary_left
        width = layout.summary_width
        y = layout.grid_top

        draw.text((left, y), frame.period_caption, font=heading_font, fill=cfg.foreground_color)
        y += cfg.label_font_size + 6
        draw.text((left, y), _truncate(frame.period_label, body_font, width), font=body_font, fill=cfg.muted_color)
        y += cfg.column_font_size + 16

        if not frame.active_orders:
            draw.text((left, y), "No active work orders", font=body_font, fill=cfg.muted_color)
            return

        for order in frame.active_orders:
            if y + layout.summary_line_height > layout.canvas_height - layout.padding:
                break
            self._draw_summary_entry(draw, order, left, y, body_font, heading_font)
            y += layout.summary_line_height

    def _draw_summary_entry(
        self,
        draw: ImageDraw.ImageDraw,
        order: WorkOrder,
        left: int,
        top: int,
        body_font: ImageFont.ImageFont,
        name_font: ImageFont.ImageFont,
    ) -> None:
        cfg = self.config
        width = cfg.layout.summary_width
        color = cfg.status_colors.get(order.status, cfg.muted_color)
        draw.rectangle((left, top + 2, left + 4, top + cfg.layout.summary_line_height - 8), fill=color)
        draw.text((left + 12, top), _truncate(order.name, name_font, width - 12), font=name_font, fill=cfg.foreground_color)
        detail = f"{order.status.label} · {order.start:%b %d} – {order.end:%b %d}"
        draw.text(
            (left + 12, top + cfg.label_font_size + 2),
            _truncate(detail, body_font, width - 12),
            font=body_font,
            fill=cfg.muted_color,
        )


__all__ = ["DEFAULT_STATUS_COLORS", "RendererConfig", "TimelineRenderer"]
