"""Subscription duration resolution and end-date arithmetic.

A vendor's custom duration (set by an admin) overrides its bundle's
duration; each side brings its own optional bonus period.
"""


import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from app.domain.catalog import Bundle
from app.domain.vendor import Vendor

UNITS = ("days", "months", "years")


@dataclass(frozen=True)
class Duration:
    value: int
    unit: str = "months"

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "Duration | None":
        """Build from ``{"value", "unit"}``; None when no positive value is set."""
        if not data or not data.get("value"):
            return None
        return cls(value=int(data["value"]), unit=data.get("unit") or "months")

    def as_dict(self) -> dict[str, Any]:
        return {"value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class ResolvedDuration:
    base: Duration
    bonus: Duration | None = None
    source: str = "bundle"  # "bundle" | "custom"


def add_duration(start: datetime, duration: Duration) -> datetime:
    """Calendar-aware addition. Month/year overflow clamps to the month's last day."""
    if duration.unit == "days":
        return start + timedelta(days=duration.value)
    if duration.unit == "months":
        months = duration.value
    elif duration.unit == "years":
        months = duration.value * 12
    else:
        raise ValueError(f"Unknown duration unit: {duration.unit!r}")

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp instead of rolling over: Jan 31 + 1 month is Feb 28/29, never Mar 2/3.
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def compute_end_date(
    start: datetime, base: Duration, bonus: Duration | None = None
) -> datetime:
    end = add_duration(start, base)
    if bonus is not None and bonus.value > 0:
        end = add_duration(end, bonus)
    return end


def bundle_durations(bundle: Bundle) -> ResolvedDuration:
    bonus = None
    if bundle.bonus_value:
        bonus = Duration(bundle.bonus_value, bundle.bonus_unit)
    return ResolvedDuration(
        base=Duration(bundle.duration_value, bundle.duration_unit), bonus=bonus
    )


class SubscriptionResolver:
    """Resolves a vendor's effective (base, bonus) duration."""

    def __init__(self, bundles):
        self._bundles = bundles

    async def resolve_duration(self, vendor: Vendor) -> ResolvedDuration | None:
        custom = vendor.custom_duration or {}
        base = Duration.from_mapping(custom)
        if base is not None:
            bonus = Duration.from_mapping(custom.get("bonusPeriod"))
            return ResolvedDuration(base=base, bonus=bonus, source="custom")

        if not vendor.selected_bundle_id:
            return None
        bundle = await self._bundles.get_by_id(vendor.selected_bundle_id)
        if bundle is None:
            return None
        return bundle_durations(bundle)

    async def end_date_for(self, vendor: Vendor, start: datetime) -> datetime | None:
        resolved = await self.resolve_duration(vendor)
        if resolved is None:
            return None
        return compute_end_date(start, resolved.base, resolved.bonus)
