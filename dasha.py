"""Vimshottari dasha period tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from intervals import DurationYMD, TimeInterval, format_instant, split
from planets import Planet

DASHA_ORDER = [
    Planet.KETU,
    Planet.VENUS,
    Planet.SUN,
    Planet.MOON,
    Planet.MARS,
    Planet.RAHU,
    Planet.JUPITER,
    Planet.SATURN,
    Planet.MERCURY,
]

DASHA_YEARS = {
    Planet.KETU: 7,
    Planet.VENUS: 20,
    Planet.SUN: 6,
    Planet.MOON: 10,
    Planet.MARS: 7,
    Planet.RAHU: 18,
    Planet.JUPITER: 16,
    Planet.SATURN: 19,
    Planet.MERCURY: 17,
}

TOTAL_YEARS = 120.0

# Nesting levels of the period tree.
MAHADASHA = 1
ANTARDASHA = 2
PRATYANTARDASHA = 3


class DashaError(Exception):
    """Base class for dasha resolution failures."""


class MissingTopLevelPeriod(DashaError, LookupError):
    """The selected planet has no Mahadasha in the chart sequence."""

    def __init__(self, planet: Planet) -> None:
        super().__init__(f"No Mahadasha found for {planet}")
        self.planet = planet


class MissingReferenceData(DashaError, LookupError):
    """No Antardasha weight table is available for a ruling planet."""

    def __init__(self, planet: Planet) -> None:
        super().__init__(f"No Antardasha reference data for {planet}")
        self.planet = planet


@dataclass(frozen=True)
class WeightedPeriod:
    """Share of a parent period, in percent, given to one planet."""

    planet: Planet
    weight_percent: float

    def __post_init__(self) -> None:
        if not 0 < self.weight_percent <= 100:
            raise ValueError(f"Weight for {self.planet} must be in (0, 100], got {self.weight_percent}")


@dataclass(frozen=True)
class Period:
    """A node of the dasha tree.

    ``children`` is ``None`` until the sub-periods have been resolved.
    """

    planet: Planet
    interval: TimeInterval
    children: Optional[Tuple["Period", ...]] = None
    level: int = MAHADASHA

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def is_resolved(self) -> bool:
        return self.children is not None

    def with_children(self, children: Sequence["Period"]) -> "Period":
        return Period(self.planet, self.interval, tuple(children), self.level)


@dataclass(frozen=True)
class ActiveMarker:
    """The sub-period containing the evaluation instant."""

    period: Period
    elapsed: DurationYMD = field(default_factory=DurationYMD)
    remaining: DurationYMD = field(default_factory=DurationYMD)

    def to_payload(self) -> Dict[str, object]:
        payload = period_to_payload(self.period, nested=False)
        payload["elapsed"] = self.elapsed.to_dict()
        payload["remaining"] = self.remaining.to_dict()
        return payload


def subdivide(parent: TimeInterval, weights: Sequence[WeightedPeriod], level: int = ANTARDASHA) -> List[Period]:
    """Apportion ``parent`` among ``weights`` in the order given."""

    pieces = split(parent, [weight.weight_percent for weight in weights])
    return [Period(weight.planet, piece, None, level) for weight, piece in zip(weights, pieces)]


def vimshottari_weights(lord: Planet) -> List[WeightedPeriod]:
    """Standard Antardasha shares of a Mahadasha, starting with its own lord."""

    index = DASHA_ORDER.index(lord)
    sequence = DASHA_ORDER[index:] + DASHA_ORDER[:index]
    return [WeightedPeriod(planet, DASHA_YEARS[planet] / TOTAL_YEARS * 100) for planet in sequence]


def weights_from_mapping(table: Mapping[str, float]) -> List[WeightedPeriod]:
    """Convert a ``{planet: percent}`` mapping, keeping its order."""

    return [WeightedPeriod(Planet.parse(name), float(percent)) for name, percent in table.items()]


def period_from_payload(payload: Mapping[str, object], level: int = MAHADASHA) -> Period:
    """Build a period from ``{planet, startDate, endDate}`` chart data.

    A Mahadasha reads its sub-periods from ``antardasha.sequence`` and an
    Antardasha from ``pratyantardasha``; other levels have none. A missing
    subtree stays ``None``.
    """

    try:
        planet = Planet.parse(payload["planet"])  # type: ignore[arg-type]
        interval = TimeInterval.parse(payload["startDate"], payload["endDate"])  # type: ignore[arg-type]
    except KeyError as exc:
        raise ValueError(f"Period is missing field {exc.args[0]!r}") from exc

    children_payload = None
    if level == MAHADASHA:
        antardasha = payload.get("antardasha")
        if isinstance(antardasha, Mapping) and antardasha.get("sequence") is not None:
            children_payload = antardasha["sequence"]
    elif level == ANTARDASHA:
        children_payload = payload.get("pratyantardasha")

    children = None
    if children_payload is not None:
        children = tuple(period_from_payload(child, level + 1) for child in children_payload)  # type: ignore[union-attr]
    return Period(planet, interval, children, level)


def period_to_payload(period: Period, nested: bool = True) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "planet": period.planet.display_name,
        "startDate": format_instant(period.start),
        "endDate": format_instant(period.end),
    }
    if nested and period.children is not None:
        children = [period_to_payload(child) for child in period.children]
        if period.level == MAHADASHA:
            payload["antardasha"] = {"sequence": children}
        else:
            payload["pratyantardasha"] = children
    return payload


def periods_to_dataframe(periods: Sequence[Period], active: Optional[Period] = None) -> pd.DataFrame:
    """Tabulate periods in the order given; rows are never re-sorted."""

    return pd.DataFrame(
        [
            {
                "Planet": period.planet.display_name,
                "Abbr": period.planet.abbreviation,
                "Start": period.start,
                "End": period.end,
                "Level": period.level,
                "Current": active is not None and period == active,
            }
            for period in periods
        ],
        columns=["Planet", "Abbr", "Start", "End", "Level", "Current"],
    )
