"""Antardasha resolution for a selected Mahadasha."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

import pandas as pd

from chart import DashaChart
from dasha import (
    ActiveMarker,
    MissingReferenceData,
    MissingTopLevelPeriod,
    Period,
    WeightedPeriod,
    period_to_payload,
    periods_to_dataframe,
    subdivide,
)
from intervals import breakdown, first_containing, format_date, parse_instant
from planets import Planet
from storage import ReferenceStore

logger = logging.getLogger(__name__)

WeightLookup = Callable[[Planet], Optional[Sequence[WeightedPeriod]]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ResolvedAntardasha:
    """Antardasha sequence of one Mahadasha plus the running sub-period, if any."""

    parent: Period
    sequence: Tuple[Period, ...]
    current: Optional[ActiveMarker] = None

    @property
    def tree(self) -> Period:
        """The parent Mahadasha with its sub-periods attached."""

        return self.parent.with_children(self.sequence)

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"sequence": [period_to_payload(period) for period in self.sequence]}
        if self.current is not None:
            payload["current"] = self.current.to_payload()
        return payload

    def to_dataframe(self) -> pd.DataFrame:
        active = self.current.period if self.current is not None else None
        return periods_to_dataframe(self.sequence, active=active)


def find_top_level(sequence: Iterable[Period], planet: Planet | str) -> Period:
    planet = Planet.parse(planet)
    for period in sequence:
        if period.planet == planet:
            return period
    raise MissingTopLevelPeriod(planet)


def build_antardasha(
    top_level: Period,
    weights: Sequence[WeightedPeriod],
    current_planet: Optional[Planet | str],
    now: datetime,
) -> ResolvedAntardasha:
    """Subdivide ``top_level`` and mark the sub-period running at ``now``.

    The marker is only computed when ``top_level`` is the current Mahadasha.
    """

    if not weights:
        raise MissingReferenceData(top_level.planet)

    now = parse_instant(now)
    sequence = tuple(subdivide(top_level.interval, weights))
    marker = None
    if current_planet is not None and top_level.planet == Planet.parse(current_planet):
        active = first_containing(sequence, now, key=lambda period: period.interval)
        if active is not None:
            marker = ActiveMarker(
                period=active,
                elapsed=breakdown(active.start, now),
                remaining=breakdown(now, active.end),
            )
    return ResolvedAntardasha(parent=top_level, sequence=sequence, current=marker)


def resolve_antardasha(
    top_level: Period,
    weights_for: WeightLookup,
    current_planet: Optional[Planet | str] = None,
    now: Optional[datetime | str] = None,
) -> ResolvedAntardasha:
    """Resolve the Antardasha sequence of ``top_level``.

    Raises :class:`MissingReferenceData` when ``weights_for`` has no table for
    the Mahadasha lord; nothing is synthesised in that case.
    """

    now = utc_now() if now is None else parse_instant(now)
    weights = weights_for(top_level.planet)
    if not weights:
        raise MissingReferenceData(top_level.planet)
    return build_antardasha(top_level, list(weights), current_planet, now)


class AntardashaSelection:
    """Holds the Antardasha view of one chart for one caller session.

    Only the most recent :meth:`select` call may change :attr:`resolved` or
    :attr:`error`; results of superseded calls are dropped.
    """

    def __init__(
        self,
        chart: DashaChart,
        store: ReferenceStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.chart = chart
        self.store = store
        self.clock = clock
        self.selected: Optional[Planet] = None
        self.resolved: Optional[ResolvedAntardasha] = None
        self.error: Optional[Exception] = None
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def is_latest(self, version: int) -> bool:
        return version == self._version

    async def select(self, planet: Optional[Planet | str]) -> Optional[ResolvedAntardasha]:
        """Select a Mahadasha and resolve its Antardasha sequence.

        Returns ``None`` when the selection is cleared or was superseded while
        the reference weights were being fetched.
        """

        self._version += 1
        version = self._version
        self.resolved = None
        self.error = None
        self.selected = Planet.parse(planet) if planet is not None else None
        if self.selected is None:
            return None

        try:
            top_level = find_top_level(self.chart.sequence, self.selected)
        except MissingTopLevelPeriod as exc:
            self.error = exc
            raise

        try:
            weights = await self.store.fetch_weights(top_level.planet)
        except Exception as exc:
            if not self.is_latest(version):
                logger.debug("Discarding stale lookup failure for %s (version %d): %s", top_level.planet, version, exc)
                return None
            self.error = exc
            raise
        if not self.is_latest(version):
            logger.debug("Discarding stale Antardasha result for %s (version %d)", top_level.planet, version)
            return None

        try:
            result = build_antardasha(top_level, weights or [], self.chart.current_planet, self.clock())
        except MissingReferenceData as exc:
            self.error = exc
            raise

        self.resolved = result
        if result.current is not None:
            logger.info(
                "Resolved %d Antardashas for %s, current %s until %s",
                len(result.sequence),
                top_level.planet,
                result.current.period.planet,
                format_date(result.current.period.end),
            )
        else:
            logger.info("Resolved %d Antardashas for %s", len(result.sequence), top_level.planet)
        return result
