"""
Build the totals report for every period in a year, for exporting
to another system.
"""

import logging

import tqdm

from .config import Settings
from .report import build_report
from .types import Month


logger = logging.getLogger(__name__)


def export_year(settings: Settings, year: int) -> dict[str, object]:
    """
    Build the report for every month in a year, plus the whole year.

    The keys are ``YYYY-MM`` for each month and ``YYYY`` for the year.
    """
    result: dict[str, object] = {}

    months: list[Month] = [*range(1, 13), "all"]

    for month in tqdm.tqdm(months):
        rows, totals = build_report(settings, year, month, sort="config")

        if month == "all":
            key = str(year)
        else:
            key = f"{year}-{month:02d}"

        logger.debug("Exported %d sites for %s", len(rows), key)
        result[key] = {"rows": rows, "totals": totals}

    return result
