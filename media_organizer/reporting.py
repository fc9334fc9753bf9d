import csv
import logging
from pathlib import Path
from typing import Iterable

from .models import Outcome, PlacementResult

HEADERS = [
    "Source Path",
    "Outcome",
    "Category",
    "Destination Path",
    "Date Source",
    "Notes",
]


class ReportGenerator:
    def write_report(self, results: Iterable[PlacementResult], output_csv: Path) -> int:
        """
        Writes one CSV row per placement decision. Returns the number of rows.
        """
        output_csv = Path(output_csv)
        output_csv.parent.mkdir(parents=True, exist_ok=True)
        logging.info(f"Writing report -> {output_csv}")

        count = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for result in results:
                writer.writerow(self._row(result))
                count += 1

        logging.info(f"Report complete. {count} files.")
        return count

    def _row(self, result: PlacementResult) -> list:
        category = result.category.value if result.category else ""
        dest = str(result.destination) if result.destination else ""

        if result.outcome is Outcome.DIVERTED_AS_DUPLICATE:
            notes = f"Renamed to {result.renamed_to}"
        elif result.outcome is Outcome.ALREADY_PRESENT_IDENTICAL:
            notes = "Identical content already present"
        elif result.outcome is Outcome.FAILED:
            notes = result.error or ""
        else:
            notes = ""

        return [str(result.source), result.outcome.value, category, dest, result.date_source or "", notes]
