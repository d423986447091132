"""
Idempotent config store writes and the append-only deployment records file.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .errors import PersistenceConflictError
from .models import DeploymentRecord
from .store import ConfigStore

logger = logging.getLogger(__name__)


class WriteResult(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


class PersistenceWriter:
    """
    Appends KEY=value entries, never touching a key that is already recorded.

    A rerun that produces a new value for an existing key leaves the store
    as it is and logs a PersistenceConflictError warning instead.
    """

    def __init__(self):
        self.conflicts: List[PersistenceConflictError] = []

    def append(self, store: ConfigStore, key: str, value: str, section: Optional[str] = None) -> WriteResult:
        current = store.load()
        if key in current:
            conflict = PersistenceConflictError(key, current[key], value)
            self.conflicts.append(conflict)
            logger.warning(f"⚠️ {conflict}")
            return WriteResult.SKIPPED

        store.append(key, value, section=section)
        logger.info(f"✅ {key}={value} appended to {store.path}")
        return WriteResult.WRITTEN


class RecordWriter:
    """One JSON line per successful deployment, in `<directory>/<network>.jsonl`."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, network: str) -> Path:
        return self.directory / f"{network}.jsonl"

    def write(self, record: DeploymentRecord) -> Path:
        path = self.path_for(record.network)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record.to_dict(), sort_keys=True) + "\n")
        logger.info(f"Deployment record for {record.unit} saved to {path}")
        return path

    def read(self, network: str) -> List[DeploymentRecord]:
        path = self.path_for(network)
        if not path.exists():
            return []
        records = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(DeploymentRecord(**json.loads(line)))
        return records
