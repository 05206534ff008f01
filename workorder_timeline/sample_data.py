"""Default work centers and generated demo schedules."""

from __future__ import annotations

import random
import uuid
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from . import intervals
from .models import TimeScale, WorkCenter, WorkOrder, WorkOrderStatus

DEFAULT_WORK_CENTERS: Tuple[WorkCenter, ...] = (
    WorkCenter("wc-1", "Extrusion Line A"),
    WorkCenter("wc-2", "CNC Machine 1"),
    WorkCenter("wc-3", "Assembly Station"),
    WorkCenter("wc-4", "Quality Control"),
    WorkCenter("wc-5", "Packaging Line"),
)

SAMPLE_TITLES = (
    "Omega Forge",
    "Titanium Weld",
    "Cyberdyne Systems",
    "Mars Rover Chassis",
    "Nano Coating",
    "Fusion Core V4",
    "Quantum Stabilizer",
    "Flux Capacitor",
    "Positron Matrix",
    "Hydraulic Press",
    "Laser Cutter",
    "Assembly Unit 7",
)

MAX_ATTEMPTS = 200


def generate_sample_orders(
    now: datetime | date,
    *,
    rng: Optional[random.Random] = None,
    count: int = 20,
    work_centers: Tuple[WorkCenter, ...] = DEFAULT_WORK_CENTERS,
) -> List[WorkOrder]:
    """Random non-overlapping orders of 7-21 days within three months of ``now``."""

    rng = rng or random.Random()
    today = intervals.as_datetime(now).date()
    window_start = intervals.offset(today, -3, TimeScale.MONTH).date()
    window_end = intervals.offset(today, 3, TimeScale.MONTH).date()
    total_days = (window_end - window_start).days

    occupied: Dict[str, List[Tuple[date, date]]] = {center.id: [] for center in work_centers}
    orders: List[WorkOrder] = []
    attempts = 0
    while len(orders) < count and attempts < MAX_ATTEMPTS:
        attempts += 1
        center = rng.choice(work_centers)
        duration = rng.randint(7, 21)
        start = window_start + timedelta(days=rng.randrange(max(total_days - duration, 1)))
        end = start + timedelta(days=duration)

        if any(start < slot_end and end > slot_start for slot_start, slot_end in occupied[center.id]):
            continue

        occupied[center.id].append((start, end))
        orders.append(
            WorkOrder(
                id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
                name=f"{rng.choice(SAMPLE_TITLES)} #{len(orders) + 1001}",
                work_center_id=center.id,
                status=rng.choice(list(WorkOrderStatus)),
                start=start,
                end=end,
            )
        )
    return orders
