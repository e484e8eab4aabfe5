"""
Checkpoint management for crawler resumability.

Each completed batch of brands is written to its own JSON file. A brand is
considered processed once (and only once) a batch containing it has been
written successfully; the processed set is rebuilt from those files at start.
"""

import json
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Set

from catalog_crawler.exceptions import PersistenceError
from catalog_crawler.models import Batch, DeviceRecord, STATUS_OK
from catalog_crawler.utils.logging import get_logger

logger = get_logger("checkpoint")


class BatchSerializer:
    """Stateless conversion between Batch objects and JSON documents."""

    def to_dict(self, batch: Batch) -> Dict[str, Any]:
        return {
            "batch_id": batch.id,
            "written_at": datetime.now().isoformat(),
            "total_brands": len(batch.entries),
            "total_devices": batch.device_count,
            "error_count": batch.error_count,
            "brands": {
                name: [r.to_dict() for r in records]
                for name, records in batch.entries.items()
            },
        }

    def from_dict(self, data: Dict[str, Any]) -> Batch:
        entries = {}
        for name, records in data["brands"].items():
            entries[name] = [
                DeviceRecord(
                    model=r["model"],
                    display_name=r.get("name", ""),
                    status=r.get("status", STATUS_OK),
                    error=r.get("error", ""),
                )
                for r in records
            ]
        return Batch(id=int(data["batch_id"]), entries=entries)

    def dumps(self, batch: Batch) -> str:
        return json.dumps(self.to_dict(batch), ensure_ascii=False, indent=2)

    def loads(self, text: str) -> Batch:
        return self.from_dict(json.loads(text))


class CheckpointStore:
    """Append-only store of batch checkpoint files."""

    def __init__(self, output_dir: Path, serializer: BatchSerializer = None, prefix: str = "batch"):
        """
        Initialize checkpoint store.

        Args:
            output_dir: Directory for checkpoint files
            serializer: Batch <-> JSON converter
            prefix: File name stem, files are named '<prefix>_<id>.json'
        """
        self.output_dir = Path(output_dir)
        self.serializer = serializer or BatchSerializer()
        self.prefix = prefix
        self._pattern = re.compile(rf"^{re.escape(prefix)}_(\d+)\.json$")
        self._temp_pattern = re.compile(rf"^\.{re.escape(prefix)}_\d+\..*\.tmp$")

    def path_for(self, batch_id: int) -> Path:
        return self.output_dir / f"{self.prefix}_{batch_id}.json"

    def list_existing(self) -> List[int]:
        """Return the ids of all committed batches, ascending."""
        if not self.output_dir.exists():
            return []
        ids = []
        for path in self.output_dir.iterdir():
            match = self._pattern.match(path.name)
            if match and path.is_file():
                ids.append(int(match.group(1)))
        return sorted(ids)

    def next_batch_id(self) -> int:
        existing = self.list_existing()
        return existing[-1] + 1 if existing else 1

    def discard_partial_writes(self) -> int:
        """
        Remove temporary files left behind by a write that never reached
        its rename. Only safe while no other writer is active.

        Returns:
            Number of files removed
        """
        if not self.output_dir.exists():
            return 0
        removed = 0
        for path in self.output_dir.iterdir():
            if not self._temp_pattern.match(path.name):
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove stale temp file {path.name}: {e}")
        if removed:
            logger.info(f"Removed {removed} stale checkpoint temp file(s)")
        return removed

    def read(self, batch_id: int) -> Batch:
        """
        Load one committed batch.

        Raises:
            PersistenceError: if the file is missing or unreadable
        """
        path = self.path_for(batch_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return self.serializer.loads(f.read())
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"Could not read checkpoint {path}: {e}", batch_id) from e

    def write(self, batch: Batch) -> Path:
        """
        Persist a batch atomically.

        The content goes to a temporary file in the same directory which is
        then renamed into place, so a crash never leaves a partial batch
        under the final name.

        Raises:
            PersistenceError: if the batch id is taken or the write fails
        """
        path = self.path_for(batch.id)
        if path.exists():
            raise PersistenceError(f"Checkpoint {path.name} already exists", batch.id)

        tmp_name = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            payload = self.serializer.dumps(batch)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.output_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceError(f"Could not write checkpoint {path}: {e}", batch.id) from e

        logger.info(f"Successfully wrote batch {batch.id} to {path.name}")
        return path

    def load_processed(self) -> Set[str]:
        """
        Rebuild the processed-brand set from every committed batch.

        Unreadable checkpoints are logged and skipped; their brands will be
        crawled again.
        """
        processed: Set[str] = set()
        for batch_id in self.list_existing():
            try:
                processed.update(self.read(batch_id).brand_names)
            except PersistenceError as e:
                logger.warning(f"Failed to load checkpoint: {e}")
        return processed
