"""
Staging manifest management.

Tracks which artifact was compiled from which source, with the source's
content hash and mtime at compile time. The manifest lives next to the
artifacts in the staging root and is the cache table the Materializer
consults.
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1
MANIFEST_NAME = "manifest.json"


def compute_content_hash(content: str) -> str:
    """Compute SHA256 hash of content."""
    return "sha256:" + hashlib.sha256(content.encode()).hexdigest()


class StagingManifest:
    """In-memory cache table backed by <staging_root>/manifest.json."""

    def __init__(self, staging_root: Path):
        self.path = Path(staging_root) / MANIFEST_NAME
        self._data = self._load()

    def _empty(self) -> dict[str, Any]:
        return {
            "manifest_version": MANIFEST_VERSION,
            "artifacts": {}
        }

    def _load(self) -> dict[str, Any]:
        """Load the manifest, starting empty if missing or unreadable."""
        if not self.path.exists():
            return self._empty()

        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable staging manifest {self.path}: {e}")
            return self._empty()

        if data.get("manifest_version", 0) != MANIFEST_VERSION:
            return self._empty()

        return data

    def save(self) -> None:
        """Write the manifest to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data["manifest_version"] = MANIFEST_VERSION
        self.path.write_text(json.dumps(self._data, indent=2, sort_keys=True))

    def get(self, source_path: Path) -> dict[str, Any] | None:
        """Get the entry for a source file."""
        return self._data["artifacts"].get(str(source_path))

    def record(
        self,
        source_path: Path,
        artifact_path: Path,
        content_hash: str,
        source_mtime: float
    ) -> None:
        """Record a fresh compilation and persist the manifest."""
        self._data["artifacts"][str(source_path)] = {
            "artifact": str(artifact_path),
            "hash": content_hash,
            "source_mtime": source_mtime,
            "compiled_at": datetime.now(timezone.utc).isoformat()
        }
        self.save()

    def remove(self, source_path: Path) -> None:
        """Forget a source file."""
        if self._data["artifacts"].pop(str(source_path), None) is not None:
            self.save()

    def __len__(self) -> int:
        return len(self._data["artifacts"])
