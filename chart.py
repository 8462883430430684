"""Normalisation of the ``dashas`` block of externally sourced chart data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from dasha import Period, period_from_payload, period_to_payload
from intervals import DurationYMD
from planets import Planet


@dataclass(frozen=True)
class CurrentDasha:
    """The running Mahadasha as reported by the chart source."""

    period: Period
    elapsed: DurationYMD = field(default_factory=DurationYMD)
    remaining: DurationYMD = field(default_factory=DurationYMD)

    @property
    def planet(self) -> Planet:
        return self.period.planet


@dataclass(frozen=True)
class DashaChart:
    current: Optional[CurrentDasha]
    sequence: Tuple[Period, ...]

    @property
    def current_planet(self) -> Optional[Planet]:
        return self.current.planet if self.current is not None else None

    def planets(self) -> List[Planet]:
        return [period.planet for period in self.sequence]

    def to_json(self) -> Dict[str, Any]:
        current = None
        if self.current is not None:
            current = period_to_payload(self.current.period)
            current["elapsed"] = self.current.elapsed.to_dict()
            current["remaining"] = self.current.remaining.to_dict()
            current.setdefault("antardasha", None)
        sequence = []
        for period in self.sequence:
            item = period_to_payload(period)
            item.setdefault("antardasha", None)
            sequence.append(item)
        return {"current": current, "sequence": sequence}


def chart_from_payload(dashas: Mapping[str, Any]) -> DashaChart:
    """Build a :class:`DashaChart` from ``{current, sequence}``.

    Missing ``elapsed``/``remaining`` become zero durations and a missing
    ``antardasha`` stays unresolved. The sequence keeps its source order.
    """

    current_payload = dashas.get("current")
    current = None
    if current_payload:
        current = CurrentDasha(
            period=period_from_payload(current_payload),
            elapsed=DurationYMD.from_dict(current_payload.get("elapsed")),
            remaining=DurationYMD.from_dict(current_payload.get("remaining")),
        )
    sequence = tuple(period_from_payload(item) for item in dashas.get("sequence") or [])
    return DashaChart(current=current, sequence=sequence)
