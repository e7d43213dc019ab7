from collections.abc import Iterator
import calendar
import datetime


def this_year() -> int:
    """
    Return the current year, which is the default period for the report.
    """
    return datetime.date.today().year


def days_of_month(year: int, month: int) -> Iterator[datetime.date]:
    """
    Generate all the days in a month, from the 1st to the last day,
    e.g. 29 days for February 2024.
    """
    _, day_count = calendar.monthrange(year, month)

    for day in range(1, day_count + 1):
        yield datetime.date(year, month, day)


def first_of_month(year: int, month: int) -> str:
    return datetime.date(year, month, 1).isoformat()


def awstats_date_to_iso(yyyymmdd: str) -> str:
    """
    Convert a date from a DAY block (``20240131``) into an ISO 8601
    date (``2024-01-31``).
    """
    return f"{yyyymmdd[0:4]}-{yyyymmdd[4:6]}-{yyyymmdd[6:8]}"
