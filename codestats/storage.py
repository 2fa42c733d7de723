from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import quote

from .errors import StorageFailure

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Keyed single-document read/replace store.

    Implementations return copies, so callers may mutate what ``get`` hands
    back without touching stored state until they ``put`` it."""

    @abstractmethod
    def get(self, key: str) -> Optional[Document]:
        """Return the document stored under key, or None."""

    @abstractmethod
    def put(self, key: str, document: Document) -> None:
        """Replace the whole document under key; raise StorageFailure on error."""

    def close(self) -> None:
        """Release resources. Most backends have none."""


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, initial: Optional[Dict[str, Document]] = None) -> None:
        self._lock = threading.Lock()
        self._docs: Dict[str, Document] = {k: copy.deepcopy(v) for k, v in (initial or {}).items()}

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def put(self, key: str, document: Document) -> None:
        try:
            snapshot = json.loads(json.dumps(document))
        except (TypeError, ValueError) as exc:
            raise StorageFailure(f"document {key!r} is not serializable: {exc}") from exc
        with self._lock:
            self._docs[key] = snapshot


class JsonFileDocumentStore(DocumentStore):
    """One JSON file per key under ``<root>/<collection>/``.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a failed write leaves the previous document."""

    def __init__(self, root: str, collection: str) -> None:
        self._dir = os.path.join(root, collection)
        self._lock = threading.Lock()

    @property
    def directory(self) -> str:
        return self._dir

    def path_for(self, key: str) -> str:
        return os.path.join(self._dir, quote(key, safe="") + ".json")

    def get(self, key: str) -> Optional[Document]:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            raise StorageFailure(f"cannot read {path}: {exc}") from exc

    def put(self, key: str, document: Document) -> None:
        path = self.path_for(key)
        try:
            payload = json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise StorageFailure(f"document {key!r} is not serializable: {exc}") from exc

        with self._lock:
            tmp_path = None
            try:
                os.makedirs(self._dir, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
                tmp_path = None
            except OSError as exc:
                raise StorageFailure(f"cannot write {path}: {exc}") from exc
            finally:
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
