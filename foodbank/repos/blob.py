# foodbank/repos/blob.py
import copy
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from foodbank.core.errors import ExternalSourceError

logger = logging.getLogger(__name__)

class InMemoryBlobStore:
    """Keeps the last saved snapshot in process memory."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._blob: Optional[Dict[str, Any]] = copy.deepcopy(initial) if initial is not None else None

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._blob)

    def save(self, snapshot: Dict[str, Any]) -> None:
        self._blob = copy.deepcopy(snapshot)

class JsonFileBlobStore:
    """
    Snapshot persisted as a single JSON document.
    Writes go to a sibling temp file first and are swapped in with a rename.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as ex:
            logger.exception("failed to load snapshot from %s", self.path)
            raise ExternalSourceError(f"Cannot read {self.path}: {ex}") from ex

    def save(self, snapshot: Dict[str, Any]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(snapshot, fh, ensure_ascii=False, indent=2)
            tmp.replace(self.path)
        except OSError as ex:
            logger.exception("failed to save snapshot to %s", self.path)
            raise ExternalSourceError(f"Cannot write {self.path}: {ex}") from ex

def make_store(path: Optional[Path]):
    if path is None:
        return InMemoryBlobStore()
    return JsonFileBlobStore(path)
