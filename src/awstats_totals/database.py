"""
Database code.

AWStats keeps its "database" as a directory of text files, one per
site per month.  This file should handle all interactions between the
app and those files.
"""

import logging
import pathlib

from . import date_helpers
from .datafile import (
    get_block_lines,
    parse_day_row,
    parse_general,
    parse_sider_404_row,
    parse_sider_row,
    parse_time_row,
)
from .scanner import list_files
from .types import DayCounts, MissingPage, PageCount, PeriodAggregate


logger = logging.getLogger(__name__)


def data_filename(config: str, year: int, month: int) -> str:
    """
    Return the name AWStats gives the database file for a site/month, e.g.

        >>> data_filename("example.com", 2024, 1)
        'awstats012024.example.com.txt'

    """
    return f"awstats{month:02d}{year:04d}.{config}.txt"


class AWStatsDatabase:
    """
    Wraps a directory of AWStats database files and provides some
    convenience methods for querying it.
    """

    def __init__(self, data_dir: pathlib.Path | str):
        """
        Create a new instance of AWStatsDatabase.
        """
        self.data_dir = pathlib.Path(data_dir)

    def exists(self) -> bool:
        return self.data_dir.is_dir()

    def resolve_file(self, config: str, year: int, month: int) -> pathlib.Path | None:
        """
        Find the database file for a site in a given month.

        AWStats normally puts these directly in the data directory, but
        they can be moved into subdirectories, so if it's not at the
        top level we look through the whole tree.
        """
        filename = data_filename(config, year, month)

        path = self.data_dir / filename
        if path.is_file():
            return path

        for path in list_files(self.data_dir):
            if path.name == filename:
                return path

        return None

    def get_month_totals(
        self,
        config: str,
        year: int,
        month: int,
        default: int | None = 0,
        known_file: pathlib.Path | None = None,
    ) -> PeriodAggregate:
        """
        Get the summary counters for a site in a given month.

        Visits and unique visitors come from the GENERAL block; if the file
        or the keys are missing, they're set to ``default``.  Everything
        else is summed over the hours in the TIME block, so it's zero if
        the file is missing.
        """
        path = known_file or self.resolve_file(config, year, month)

        if path is None:
            logger.debug("No database file for %s in %04d-%02d", config, year, month)

        general = parse_general(get_block_lines("GENERAL", path))

        result: PeriodAggregate = {
            "config": config,
            "visits": general.get("TotalVisits", default),
            "unique": general.get("TotalUnique", default),
            "pages": 0,
            "hits": 0,
            "bandwidth": 0,
            "not_viewed_pages": 0,
            "not_viewed_hits": 0,
            "not_viewed_bandwidth": 0,
        }

        for line in get_block_lines("TIME", path):
            row = parse_time_row(line)

            result["pages"] += row["pages"]
            result["hits"] += row["hits"]
            result["bandwidth"] += row["bandwidth"]
            result["not_viewed_pages"] += row["not_viewed_pages"]
            result["not_viewed_hits"] += row["not_viewed_hits"]
            result["not_viewed_bandwidth"] += row["not_viewed_bandwidth"]

        return result

    def get_year_data(self, config: str, year: int) -> dict[str, PeriodAggregate]:
        """
        Get the summary counters for every month of a year, e.g.

            {"2024-01-01" -> {…}, "2024-02-01" -> {…}, …}

        Months without a database file have None for visits/unique.
        """
        return {
            date_helpers.first_of_month(year, month): self.get_month_totals(
                config, year, month, default=None
            )
            for month in range(1, 13)
        }

    def get_month_data(
        self, config: str, year: int, month: int, complete_month: bool = True
    ) -> dict[str, DayCounts]:
        """
        Get the traffic on each day of a month, e.g.

            {"2024-02-01" -> {…}, "2024-02-02" -> {…}, …}

        If ``complete_month`` is True, this returns every day in the month,
        even if some of them aren't in the database file.
        """
        result: dict[str, DayCounts] = {}

        if complete_month:
            for day in date_helpers.days_of_month(year, month):
                result[day.isoformat()] = {
                    "pages": None,
                    "hits": None,
                    "bandwidth": None,
                    "visits": None,
                }

        path = self.resolve_file(config, year, month)

        for line in get_block_lines("DAY", path):
            row = parse_day_row(line)

            result[date_helpers.awstats_date_to_iso(row["date"])] = {
                "pages": row["pages"],
                "hits": row["hits"],
                "bandwidth": row["bandwidth"],
                "visits": row["visits"],
            }

        return result

    def get_top_pages(
        self, config: str, year: int, month: int, *, limit: int = 25
    ) -> list[PageCount]:
        """
        Get the most viewed pages for a site in a given month.
        """
        path = self.resolve_file(config, year, month)

        pages = [parse_sider_row(line) for line in get_block_lines("SIDER", path)]

        return sorted(pages, key=lambda p: p["pages"], reverse=True)[:limit]

    def get_missing_pages(
        self, config: str, year: int, month: int, *, limit: int = 25
    ) -> list[MissingPage]:
        """
        Get a list of pages which returned a 404 for a site in a given month.
        """
        path = self.resolve_file(config, year, month)

        missing_pages = [
            parse_sider_404_row(line) for line in get_block_lines("SIDER_404", path)
        ]

        return sorted(missing_pages, key=lambda p: p["hits"], reverse=True)[:limit]
