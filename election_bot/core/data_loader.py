"""Election dataset loader.

Reads the JSON (and CSV summary) files produced by the offline conversion
script into an ``ElectionDataSnapshot``. One loader is built per process
and handed explicitly to whoever needs the snapshot.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from ..models import ElectionDataSnapshot

logger = logging.getLogger(__name__)

ELECTION_COMPLETE = "bihar-election-complete"
CONSTITUENCIES_MASTER = "bihar-constituencies-master"
PARTY_PERFORMANCE = "bihar-party-performance"
ALLIANCE_PERFORMANCE = "bihar-alliance-performance"
TURNOUT_ANALYSIS = "bihar-turnout-analysis"
WINNER_ANALYSIS = "bihar-winner-analysis"
SEAT_ANALYSIS = "bihar-seat-analysis"
ELECTOR_DETAILS = "bihar-elector-details"
CONSTITUENCIES_SUMMARY = "bihar-constituencies-summary"

DEFAULT_DATASETS: tuple[str, ...] = (
    f"{ELECTION_COMPLETE}.json",
    f"{CONSTITUENCIES_MASTER}.json",
    f"{PARTY_PERFORMANCE}.json",
    f"{ALLIANCE_PERFORMANCE}.json",
    f"{TURNOUT_ANALYSIS}.json",
    f"{WINNER_ANALYSIS}.json",
    f"{SEAT_ANALYSIS}.json",
    f"{ELECTOR_DETAILS}.json",
    f"{CONSTITUENCIES_SUMMARY}.csv",
)


class ElectionDataLoader:
    """Loads the election datasets once and caches the snapshot.

    Usage:
        loader = ElectionDataLoader("public/data")
        snapshot = loader.load()   # reads files
        snapshot = loader.load()   # cached, no I/O
    """

    def __init__(self, data_dir: str | Path, datasets: Optional[Iterable[str]] = None):
        self.data_dir = Path(data_dir)
        self.datasets = tuple(datasets) if datasets is not None else DEFAULT_DATASETS
        self._snapshot: Optional[ElectionDataSnapshot] = None

    @property
    def snapshot(self) -> Optional[ElectionDataSnapshot]:
        """The cached snapshot, or None before the first load."""
        return self._snapshot

    def load(self) -> ElectionDataSnapshot:
        """Load every configured dataset. Cached for the loader's lifetime."""
        if self._snapshot is not None:
            return self._snapshot

        loaded: dict[str, Any] = {}
        data_types: list[str] = []

        for file_name in self.datasets:
            path = self.data_dir / file_name
            suffix = path.suffix.lower()
            try:
                if suffix == ".json":
                    data = self._load_json(path)
                    data_type = "JSON"
                elif suffix == ".csv":
                    data = self._load_csv(path)
                    data_type = "CSV"
                else:
                    logger.warning(f"Unsupported dataset type, skipping: {file_name}")
                    continue
            except FileNotFoundError:
                logger.warning(f"Dataset not found: {path}")
                continue
            except (OSError, ValueError, csv.Error) as e:
                logger.warning(f"Failed to load {path}: {e}")
                continue

            if not data:
                continue

            loaded[path.stem] = data
            if data_type not in data_types:
                data_types.append(data_type)

        if loaded:
            self._snapshot = ElectionDataSnapshot(
                datasets=loaded,
                data_types=tuple(data_types),
                loaded_at=datetime.now(timezone.utc).isoformat(),
            )
            logger.info(f"Loaded {len(loaded)} election datasets from {self.data_dir}")
        else:
            logger.warning(f"No election data files found in {self.data_dir}")
            self._snapshot = ElectionDataSnapshot()

        return self._snapshot

    @staticmethod
    def _load_json(path: Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def _load_csv(path: Path) -> list[dict[str, str]]:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return [row for row in csv.DictReader(f) if any(row.values())]
