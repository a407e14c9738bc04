"""CSV export of scan results"""

import csv
from pathlib import Path
from typing import Iterable

from ..core.exceptions import ExportError
from ..core.models import ScanResultRecord
from ..utils.logger import setup_logger
from .console import sort_records

CSV_HEADERS = [
    'Subscription ID', 'Resource Name', 'Resource ID', 'Plan', 'Scope', 'Error'
]

logger = setup_logger("csv_export")


def export_to_csv(records: Iterable[ScanResultRecord], output_file: str) -> Path:
    """Write records to ``output_file`` as UTF-8 CSV with a header row"""

    output_path = Path(output_file)
    rows = sort_records(records)

    try:
        if output_path.parent and not output_path.parent.exists():
            output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADERS)
            for record in rows:
                writer.writerow([
                    record.subscription_id,
                    record.resource_name,
                    record.resource_id,
                    record.plan,
                    record.scope.value,
                    record.error_message or '',
                ])
    except OSError as e:
        logger.error(f"Failed to write CSV {output_path}: {e}")
        raise ExportError(f"Failed to write CSV file {output_path}: {e}") from e

    logger.info(f"Wrote {len(rows)} row(s) to {output_path}")
    return output_path
