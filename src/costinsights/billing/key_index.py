"""Slot assignment for free-form group keys.

Cost Explorer group keys are human-readable and not enumerable in advance:
"AWS VPN (10 connected devices)" may read differently next month. The index is
therefore built from whatever keys the queried window actually contains.
"""

from __future__ import annotations

from collections.abc import Sequence

from costinsights.billing.models import RawPeriodRecord


def build_key_index(periods: Sequence[RawPeriodRecord]) -> dict[str, int]:
    """Map each distinct first-level group key to a zero-based slot.

    Slots follow first-seen order over periods, then groups within a period.
    """
    keys: dict[str, int] = {}
    for period in periods:
        for group in period.groups:
            if group.key not in keys:
                keys[group.key] = len(keys)
    return keys
