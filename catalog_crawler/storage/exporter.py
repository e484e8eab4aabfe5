"""
Data export utilities for the catalog crawler.

Merges committed batch checkpoints into combined JSON and CSV files.
"""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from catalog_crawler.storage.checkpoint import CheckpointStore
from catalog_crawler.exceptions import PersistenceError
from catalog_crawler.utils.logging import get_logger

logger = get_logger("export")


class DataExporter:
    """Exports crawled data to various formats."""

    def __init__(self, output_dir: Path, site_name: str):
        """
        Initialize data exporter.

        Args:
            output_dir: Directory for output files
            site_name: Catalog site name (for metadata)
        """
        self.output_dir = Path(output_dir)
        self.site_name = site_name

    def collect(self, store: CheckpointStore) -> Dict[str, list]:
        """Merge all readable batches into one brand -> records mapping."""
        merged: Dict[str, list] = {}
        for batch_id in store.list_existing():
            try:
                batch = store.read(batch_id)
            except PersistenceError as e:
                logger.warning(f"Skipping batch {batch_id} in export: {e}")
                continue
            merged.update(batch.entries)
        return merged

    def export_json(self, brands: Dict[str, list]) -> Path:
        """Export merged brands to JSON."""
        total_devices = sum(len(records) for records in brands.values())
        error_count = sum(1 for records in brands.values() for r in records if r.is_error)

        output = {
            "site": self.site_name,
            "exported_at": datetime.now().isoformat(),
            "total_brands": len(brands),
            "total_devices": total_devices,
            "error_count": error_count,
            "brands": {
                name: [r.to_dict() for r in records]
                for name, records in brands.items()
            },
        }

        json_file = self.output_dir / "devices.json"
        self._write_json(json_file, output)
        return json_file

    def export_csv(self, brands: Dict[str, list]) -> Path:
        """Export merged brands to a flat CSV, one row per device."""
        csv_file = self.output_dir / "devices.csv"
        with open(csv_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['brand', 'model', 'name', 'status', 'error'])
            for brand in sorted(brands):
                for r in brands[brand]:
                    writer.writerow([brand, r.model, r.display_name, r.status, r.error])
        return csv_file

    def export_all(self, store: CheckpointStore) -> List[Path]:
        brands = self.collect(store)
        exported = [self.export_json(brands), self.export_csv(brands)]
        logger.info(f"Exported files: {', '.join(f.name for f in exported)}")
        return exported

    def _write_json(self, path: Path, data: Dict) -> None:
        """Write data to JSON file."""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
