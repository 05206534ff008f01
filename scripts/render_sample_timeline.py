#!/usr/bin/env python3
"""Generate a sample timeline preview PNG from generated demo work orders."""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
import random
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from workorder_timeline.models import TimeScale
from workorder_timeline.persistence import InMemoryBackend
from workorder_timeline.rendering import TimelineRenderer
from workorder_timeline.repository import OrderRepository
from workorder_timeline.sample_data import DEFAULT_WORK_CENTERS, generate_sample_orders
from workorder_timeline.session import TimelineSession
from workorder_timeline.store import OrderStore


PREVIEWS_DIR = Path(__file__).resolve().parents[1] / "previews"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PREVIEWS_DIR,
        help="Directory receiving one preview per time scale (defaults to previews/).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=7,
        help="Random seed for the generated work orders.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    args.output_dir.mkdir(parents=True, exist_ok=True)

    now = datetime.now()
    orders = generate_sample_orders(now, rng=random.Random(args.seed))
    backend = InMemoryBackend(orders=orders, work_centers=DEFAULT_WORK_CENTERS)
    session = TimelineSession(OrderRepository(OrderStore(), backend), now_provider=lambda: now)
    session.load()
    renderer = TimelineRenderer()

    for scale in TimeScale:
        session.set_scale(scale)
        session.fit_to_data()
        output_path = args.output_dir / f"timeline_{scale.value.lower()}_sample.png"
        renderer.render(session.frame()).save(output_path)
        print(f"Wrote preview to {output_path}")

    session.close()


if __name__ == "__main__":
    main()
