"""Persistence utilities for Antardasha reference weights."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from dasha import DASHA_ORDER, WeightedPeriod, vimshottari_weights, weights_from_mapping
from planets import Planet

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_FILE = Path("dasha_reference.json")
REFERENCE_FILE_ENV = "DASHA_REFERENCE_FILE"

WeightTable = Dict[Planet, Optional[List[WeightedPeriod]]]


@dataclass
class ReferenceRecord:
    """Serializable table of Antardasha percentages per ruling planet."""

    tables: WeightTable
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        """Convert the record to a JSON-serialisable structure."""

        return {
            "metadata": self.metadata,
            "antardasha_percentages": {
                lord.display_name: None
                if weights is None
                else {weight.planet.display_name: weight.weight_percent for weight in weights}
                for lord, weights in self.tables.items()
            },
        }

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ReferenceRecord":
        """Construct a :class:`ReferenceRecord` from JSON data."""

        tables: WeightTable = {}
        for lord, table in payload.get("antardasha_percentages", {}).items():
            tables[Planet.parse(lord)] = None if table is None else weights_from_mapping(table)
        return cls(tables=tables, metadata=payload.get("metadata", {}))


def vimshottari_reference() -> ReferenceRecord:
    """Reference table with the classical ``years / 120`` shares."""

    return ReferenceRecord(
        tables={lord: vimshottari_weights(lord) for lord in DASHA_ORDER},
        metadata={"source": "vimshottari"},
    )


def save_reference_table(record: ReferenceRecord, path: str | Path) -> None:
    """Save a reference table to disk."""

    path = Path(path)
    path.write_text(json.dumps(record.to_json(), indent=2), encoding="utf-8")


def load_reference_table(path: str | Path) -> ReferenceRecord:
    """Load a reference table from disk."""

    path = Path(path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    return ReferenceRecord.from_json(payload)


class ReferenceStore:
    """Read-only lookup of Antardasha weights keyed by Mahadasha lord."""

    def __init__(self, record: ReferenceRecord | None = None, reference_file: Path | None = None) -> None:
        if record is None:
            env_file = os.environ.get(REFERENCE_FILE_ENV)
            self.reference_file = Path(reference_file or env_file or DEFAULT_REFERENCE_FILE)
            record = self._load_record()
        else:
            self.reference_file = None
        self.record = record

    def _load_record(self) -> ReferenceRecord:
        if not self.reference_file.exists():
            logger.warning("Reference file %s not found, using built-in Vimshottari shares", self.reference_file)
            return vimshottari_reference()
        record = load_reference_table(self.reference_file)
        logger.debug("Loaded %d reference tables from %s", len(record.tables), self.reference_file)
        return record

    def weights_for(self, planet: Planet | str) -> Optional[List[WeightedPeriod]]:
        """Weights for ``planet``, or ``None`` when the table is absent or empty."""

        planet = Planet.parse(planet)
        weights = self.record.tables.get(planet)
        if not weights:
            logger.warning("No Antardasha reference data for %s", planet)
            return None
        return list(weights)

    async def fetch_weights(self, planet: Planet | str) -> Optional[List[WeightedPeriod]]:
        """Asynchronous form of :meth:`weights_for` for the selection controller."""

        return await asyncio.to_thread(self.weights_for, planet)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for lord, weights in self.record.tables.items():
            for weight in weights or []:
                rows.append({"Lord": lord.display_name, "Planet": weight.planet.display_name, "Percent": weight.weight_percent})
        return pd.DataFrame(rows, columns=["Lord", "Planet", "Percent"])
