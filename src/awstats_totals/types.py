"""
Types.

These describe the data we read out of the AWStats database files, and
the rows we show in the totals report.
"""

import typing


Month = int | typing.Literal["all"]

NotViewedMode = typing.Literal["ignore", "columns", "sum"]


class PeriodAggregate(typing.TypedDict):
    """
    The summary counters for one site in one month, i.e. one
    ``awstatsMMYYYY.config.txt`` file.

    ``visits`` and ``unique`` come from the GENERAL block and may be
    None if the file doesn't record them; everything else is summed
    from the TIME block.
    """

    config: str
    visits: int | None
    unique: int | None
    pages: int
    hits: int
    bandwidth: int
    not_viewed_pages: int
    not_viewed_hits: int
    not_viewed_bandwidth: int


# A row in the totals table has the same shape as a single month, but
# may be the sum of several files (e.g. when you pick "all months").
ReportRow = PeriodAggregate


class ReportTotals(typing.TypedDict):
    """
    The grand totals across every row in the report.
    """

    visits: int
    unique: int
    pages: int
    hits: int
    bandwidth: int
    not_viewed_pages: int
    not_viewed_hits: int
    not_viewed_bandwidth: int


class TimeRow(typing.TypedDict):
    """
    One row of the TIME block: the traffic in a single hour of the day.
    """

    hour: int
    pages: int
    hits: int
    bandwidth: int
    not_viewed_pages: int
    not_viewed_hits: int
    not_viewed_bandwidth: int


class DayRow(typing.TypedDict):
    """
    One row of the DAY block.
    """

    date: str
    pages: int
    hits: int
    bandwidth: int
    visits: int


class DayCounts(typing.TypedDict):
    """
    Traffic on a single day.  The values are None for days that don't
    appear in the DAY block.
    """

    pages: int | None
    hits: int | None
    bandwidth: int | None
    visits: int | None


class PageCount(typing.TypedDict):
    """
    One row of the SIDER block: how often a single page was viewed.
    """

    url: str
    pages: int
    bandwidth: int
    entry: int
    exit: int


class MissingPage(typing.TypedDict):
    """
    One row of the SIDER_404 block: a page which wasn't found when
    somebody requested it.
    """

    url: str
    hits: int
    last_referer: str
