"""
Build the totals report: one row per site, summed across all the
database files that match the selected year and month.
"""

import itertools
import logging
import operator
import pathlib
import re

from .config import Settings, SORT_COLUMNS
from .database import AWStatsDatabase
from .scanner import list_files
from .types import Month, PeriodAggregate, ReportRow, ReportTotals


logger = logging.getLogger(__name__)


VIEWED_FIELDS = ("visits", "unique", "pages", "hits", "bandwidth")

NOT_VIEWED_FIELDS = {
    "pages": "not_viewed_pages",
    "hits": "not_viewed_hits",
    "bandwidth": "not_viewed_bandwidth",
}


def data_filename_pattern(year: int | str, month: Month) -> re.Pattern[str]:
    """
    Return a regex that matches the names of database files for the
    given period.  The groups are the month, the year and the site.
    """
    month_pattern = r"\d{2}" if month == "all" else f"{int(month):02d}"
    year_pattern = r"\d{4}" if year == "all" else f"{int(year):04d}"

    return re.compile(rf"awstats({month_pattern})({year_pattern})\.(.+)\.txt")


def get_configs_and_files(
    settings: Settings, year: int, month: Month
) -> tuple[list[str], list[pathlib.Path]]:
    """
    Find all the database files for the given period, and the name of the
    site ("config") each file belongs to.

    Returns two lists of the same length, in the order the files were
    found on disk.  Sites are excluded if they're not in the allow-list
    (when there is one) or if they're in the deny-list.
    """
    pattern = data_filename_pattern(year, month)

    configs: list[str] = []
    files: list[pathlib.Path] = []

    for path in list_files(settings.data_dir):
        m = pattern.fullmatch(path.name)
        if m is None:
            continue

        config = m.group(3)

        if settings.filter_configs and config not in settings.filter_configs:
            continue

        if config in settings.filter_ignore_configs:
            continue

        configs.append(config)
        files.append(path)

    return configs, files


def get_available_years(settings: Settings) -> list[int]:
    """
    Return every year which has at least one database file, most recent first.
    """
    pattern = data_filename_pattern(year="all", month="all")

    years = {
        int(m.group(2))
        for path in list_files(settings.data_dir)
        if (m := pattern.fullmatch(path.name))
    }

    return sorted(years, reverse=True)


def normalise_sort(settings: Settings, sort: str | None) -> str:
    """
    Return the column to sort by, falling back to the configured default
    if somebody asks for a column that doesn't exist.

    The not-viewed columns only exist in ``columns`` mode.
    """
    columns = [
        c
        for c in SORT_COLUMNS
        if settings.not_viewed == "columns" or not c.startswith("not_viewed_")
    ]

    if sort in columns:
        return sort

    if settings.sort_default in columns:
        return settings.sort_default

    return "config"



def empty_totals() -> ReportTotals:
    return {
        "visits": 0,
        "unique": 0,
        "pages": 0,
        "hits": 0,
        "bandwidth": 0,
        "not_viewed_pages": 0,
        "not_viewed_hits": 0,
        "not_viewed_bandwidth": 0,
    }


def _add(x: int | None, y: int | None) -> int | None:
    if x is None and y is None:
        return None

    return (x or 0) + (y or 0)


def merge_aggregates(
    config: str, aggregates: list[PeriodAggregate]
) -> PeriodAggregate:
    """
    Combine the counters from several files for the same site, e.g. the
    twelve monthly files when you look at a whole year.
    """
    merged: PeriodAggregate = {
        "config": config,
        "visits": None,
        "unique": None,
        "pages": 0,
        "hits": 0,
        "bandwidth": 0,
        "not_viewed_pages": 0,
        "not_viewed_hits": 0,
        "not_viewed_bandwidth": 0,
    }

    for agg in aggregates:
        merged["visits"] = _add(merged["visits"], agg["visits"])
        merged["unique"] = _add(merged["unique"], agg["unique"])
        merged["pages"] += agg["pages"]
        merged["hits"] += agg["hits"]
        merged["bandwidth"] += agg["bandwidth"]
        merged["not_viewed_pages"] += agg["not_viewed_pages"]
        merged["not_viewed_hits"] += agg["not_viewed_hits"]
        merged["not_viewed_bandwidth"] += agg["not_viewed_bandwidth"]

    return merged


def build_report(
    settings: Settings, year: int, month: Month, sort: str | None = None
) -> tuple[list[ReportRow], ReportTotals]:
    """
    Build the rows of the totals report, and the grand totals.

    How not-viewed traffic is reported depends on ``settings.not_viewed``:

    *   ``sum``: it's added to the viewed pages/hits/bandwidth
    *   ``columns``: it's shown in separate columns, and has its own totals
    *   ``ignore``: it's left out of the totals entirely

    """
    db = AWStatsDatabase(settings.data_dir)
    pattern = data_filename_pattern(year, month)

    configs, files = get_configs_and_files(settings, year, month)

    # Group the files by site, so all the files for the same site (e.g.
    # one per month when you select "all months") end up in one row.
    sorted_files = sorted(zip(configs, files), key=operator.itemgetter(0))

    totals = empty_totals()
    rows: list[ReportRow] = []

    for config, group in itertools.groupby(sorted_files, key=operator.itemgetter(0)):
        aggregates = []

        for _, path in group:
            file_month = int(pattern.fullmatch(path.name).group(1))  # type: ignore

            agg = db.get_month_totals(
                config, year, file_month, default=0, known_file=path
            )

            if settings.not_viewed == "sum":
                for viewed, not_viewed in NOT_VIEWED_FIELDS.items():
                    agg[viewed] += agg[not_viewed]  # type: ignore

            for field in VIEWED_FIELDS:
                totals[field] += agg[field] or 0  # type: ignore

            if settings.not_viewed == "columns":
                for field in NOT_VIEWED_FIELDS.values():
                    totals[field] += agg[field]  # type: ignore

            aggregates.append(agg)

        rows.append(merge_aggregates(config, aggregates))

    logger.debug(
        "Built report for %s/%s from %d files, %d sites",
        year,
        month,
        len(files),
        len(rows),
    )

    sort = normalise_sort(settings, sort)

    if sort == "config":
        rows.sort(key=lambda r: r["config"])
    else:
        # This is a stable sort, so sites with the same value stay in
        # alphabetical order.
        rows.sort(key=lambda r: r[sort] or 0, reverse=True)  # type: ignore

    return rows, totals
