"""Command line entry point that renders a timeline preview image."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import DATA_SOURCES, ConfigError, TimelineConfig, load_env_file
from .models import TimeScale, WorkOrderStatus
from .persistence import InMemoryBackend, JsonFileBackend, PersistenceBackend, RestBackend
from .rendering import RendererConfig, TimelineLayout, TimelineRenderer
from .repository import OrderRepository
from .sample_data import DEFAULT_WORK_CENTERS, generate_sample_orders
from .session import TimelineSession
from .store import ALL_STATUSES, OrderStore

LOGGER = logging.getLogger(__name__)
DEFAULT_OUTPUT = Path("previews") / "timeline.png"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Work order timeline preview renderer")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Optional path to a .env file loaded before the app starts.",
    )

    data_group = parser.add_argument_group("Data options")
    data_group.add_argument(
        "--data-source",
        choices=DATA_SOURCES,
        default=None,
        help="Where work orders are loaded from (overrides TIMELINE_DATA_SOURCE).",
    )
    data_group.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Base URL of the work order API (overrides TIMELINE_API_URL).",
    )
    data_group.add_argument(
        "--storage-path",
        type=Path,
        default=None,
        help="JSON file used by the local data source (overrides TIMELINE_STORAGE_PATH).",
    )

    view_group = parser.add_argument_group("View options")
    view_group.add_argument(
        "--scale",
        choices=[scale.value for scale in TimeScale],
        default=None,
        help="Time scale of the timeline. Defaults to the saved setting.",
    )
    view_group.add_argument(
        "--center-on",
        type=date.fromisoformat,
        default=None,
        metavar="YYYY-MM-DD",
        help="Center the view and the cursor on this date instead of fitting to the data.",
    )
    view_group.add_argument(
        "--status",
        choices=[ALL_STATUSES] + [status.value for status in WorkOrderStatus],
        default=ALL_STATUSES,
        help="Only show work orders with this status.",
    )

    output_group = parser.add_argument_group("Output options")
    output_group.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help="Where to write the PNG preview.",
    )
    output_group.add_argument("--width", type=int, default=None, help="Canvas width in pixels.")
    output_group.add_argument("--height", type=int, default=None, help="Canvas height in pixels.")

    return parser


@dataclass
class CliSettings:
    config: TimelineConfig
    scale: TimeScale | None
    center_on: date | None
    status: str
    output: Path
    width: int | None
    height: int | None


def create_backend(config: TimelineConfig, *, now_provider: Callable[[], datetime]) -> PersistenceBackend:
    """Build the persistence backend selected by ``config.data_source``."""

    if config.data_source == "server":
        return RestBackend(config.api_url, work_centers=DEFAULT_WORK_CENTERS)
    if config.data_source == "memory":
        return InMemoryBackend(
            orders=generate_sample_orders(now_provider()),
            work_centers=DEFAULT_WORK_CENTERS,
        )
    return JsonFileBackend(config.storage_path, now_provider=now_provider)


class AppRuntime:
    """Owns the backend, the session and the renderer for one preview run."""

    def __init__(
        self,
        *,
        settings: CliSettings,
        backend_factory: Callable[..., PersistenceBackend] = create_backend,
        renderer_factory: Callable[..., TimelineRenderer] = TimelineRenderer,
        now_provider: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.backend_factory = backend_factory
        self.renderer_factory = renderer_factory
        self.now_provider = now_provider or settings.config.now
        self.logger = logger or LOGGER

        self._session: TimelineSession | None = None
        self._renderer: TimelineRenderer | None = None

    @property
    def session(self) -> TimelineSession | None:
        return self._session

    def start(self) -> None:
        """Create the backend and session and load the work orders."""

        if self._session is not None:
            return

        backend = self.backend_factory(self.settings.config, now_provider=self.now_provider)
        repository = OrderRepository(OrderStore(), backend, logger=self.logger)
        session = TimelineSession(repository, now_provider=self.now_provider)
        try:
            session.load()
            session.set_status_filter(self.settings.status)
            if self.settings.scale is not None:
                session.set_scale(self.settings.scale)
            if self.settings.center_on is not None:
                session.center_on(self.settings.center_on)
            else:
                session.fit_to_data()
        except Exception:
            session.close()
            raise

        self._session = session
        self._renderer = self.renderer_factory(self._renderer_config())

    def render_once(self) -> Path:
        if self._session is None or self._renderer is None:
            raise RuntimeError("Runtime has not been started")

        frame = self._session.frame()
        self.logger.info(
            "Rendering %s view %s to %s",
            frame.scale.value,
            f"{frame.start:%Y-%m-%d}..{frame.end:%Y-%m-%d}",
            self.settings.output,
        )
        image = self._renderer.render(frame)
        output = self.settings.output
        output.parent.mkdir(parents=True, exist_ok=True)
        image.save(output)
        return output

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        self._renderer = None

    def _renderer_config(self) -> RendererConfig:
        layout = TimelineLayout()
        if self.settings.width:
            layout = replace(layout, canvas_width=self.settings.width)
        if self.settings.height:
            layout = replace(layout, canvas_height=self.settings.height)
        return RendererConfig(layout=layout)


def resolve_settings(args: argparse.Namespace) -> CliSettings:
    load_env_file(args.env_file)
    config = TimelineConfig.from_env()

    overrides = {}
    if args.data_source:
        overrides["data_source"] = args.data_source
    if args.api_url:
        if not args.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"--api-url must be an http(s) URL; got {args.api_url!r}")
        overrides["api_url"] = args.api_url
    if args.storage_path:
        overrides["storage_path"] = args.storage_path
    if overrides:
        config = replace(config, **overrides)

    return CliSettings(
        config=config,
        scale=TimeScale.parse(args.scale) if args.scale else None,
        center_on=args.center_on,
        status=args.status,
        output=args.output,
        width=args.width,
        height=args.height,
    )


def main(
    argv: Optional[Iterable[str]] = None,
    *,
    backend_factory: Callable[..., PersistenceBackend] = create_backend,
    renderer_factory: Callable[..., TimelineRenderer] = TimelineRenderer,
) -> None:
    logging.basicConfig(level=logging.INFO)
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    for name in ("width", "height"):
        value = getattr(args, name)
        if value is not None and value <= 0:
            parser.error(f"--{name} must be a positive number of pixels")

    try:
        settings = resolve_settings(args)
    except ConfigError as exc:
        parser.error(str(exc))

    runtime = AppRuntime(
        settings=settings,
        backend_factory=backend_factory,
        renderer_factory=renderer_factory,
    )

    try:
        runtime.start()
        output = runtime.render_once()
        LOGGER.info("Wrote preview to %s", output)
    finally:
        runtime.close()


if __name__ == "__main__":
    main()
