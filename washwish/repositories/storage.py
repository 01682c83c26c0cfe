"""Raw document collections backing the repositories.

A collection maps record id to a JSON-compatible dict. Repositories
validate those dicts into models, so every read hands out a fresh copy.
"""
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from washwish.errors import StorageFault

logger = logging.getLogger(__name__)


class Collection(ABC):
    name: str

    @abstractmethod
    def load(self) -> Dict[str, dict]:
        ...

    @abstractmethod
    def save(self, documents: Dict[str, dict]) -> None:
        ...


class MemoryCollection(Collection):
    def __init__(self, name: str):
        self.name = name
        self._documents: Dict[str, dict] = {}

    def load(self) -> Dict[str, dict]:
        return copy.deepcopy(self._documents)

    def save(self, documents: Dict[str, dict]) -> None:
        self._documents = copy.deepcopy(documents)


class JsonFileCollection(Collection):
    """Stores the collection as a JSON array in ``<data_dir>/<name>.json``."""

    def __init__(self, data_dir, name: str):
        self.name = name
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / f"{name}.json"

    def load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.name} from {self.path}: {e}", exc_info=True)
            raise StorageFault(f"Could not read {self.name} collection") from e
        if not isinstance(records, list):
            logger.error(f"Corrupt {self.name} collection at {self.path}: expected a JSON array")
            raise StorageFault(f"Collection {self.name} is corrupt")
        try:
            return {record["id"]: record for record in records}
        except (KeyError, TypeError) as e:
            logger.error(f"Corrupt {self.name} collection at {self.path}: record without id", exc_info=True)
            raise StorageFault(f"Collection {self.name} is corrupt") from e

    def save(self, documents: Dict[str, dict]) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{self.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(list(documents.values()), f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write {self.name} to {self.path}: {e}", exc_info=True)
            raise StorageFault(f"Could not write {self.name} collection") from e
