"""
Read the blocks out of an AWStats database file.

An AWStats database file (``awstatsMMYYYY.config.txt``) is split into
named blocks, each of which looks like:

    BEGIN_TIME 24
    0 12 34 5678 1 2 300
    1 9 20 4321 0 0 0
    …
    END_TIME

The number after the ``BEGIN_`` marker is the number of rows, but we
don't rely on it -- we just read until the matching ``END_`` marker.

The rows are space-separated fields.  AWStats files get truncated or
hand-edited occasionally, so all the row parsers here fill in missing
or garbled fields with zeroes rather than throwing an exception.
"""

import logging
import pathlib
import re

from .types import DayRow, MissingPage, PageCount, TimeRow


logger = logging.getLogger(__name__)


def get_block_lines(block_name: str, path: pathlib.Path | str | None) -> list[str]:
    """
    Return the rows of the block ``block_name`` in the given file,
    with surrounding whitespace removed.

    If the block has no end marker, everything after the begin marker
    is returned.  If the block isn't in the file, or the file can't be
    read, this returns an empty list.
    """
    if not path:
        return []

    begin_marker = re.compile(rf"BEGIN_{re.escape(block_name)} \d+")
    end_marker = f"END_{block_name}"

    lines: list[str] = []
    in_block = False

    try:
        with open(path, encoding="utf-8", errors="replace") as in_file:
            for line in in_file:
                line = line.strip()

                if not in_block:
                    in_block = begin_marker.fullmatch(line) is not None
                elif line == end_marker:
                    break
                else:
                    lines.append(line)
    except OSError as err:
        logger.warning("Unable to read block %s from %s: %s", block_name, path, err)
        return []

    return lines


def _get_field(fields: list[str], index: int) -> str:
    try:
        return fields[index]
    except IndexError:
        return ""


def _get_int(fields: list[str], index: int) -> int:
    """
    Return the field at ``index`` as an int, or 0 if it's missing or
    isn't a number.
    """
    try:
        return int(fields[index])
    except (IndexError, ValueError):
        return 0


def parse_general(lines: list[str]) -> dict[str, int]:
    """
    Parse the GENERAL block, which is ``key value`` pairs rather than
    positional fields, e.g.

        TotalVisits 1234
        TotalUnique 567

    Only keys with a numeric value are returned.
    """
    result = {}

    for line in lines:
        fields = line.split()

        if len(fields) < 2:
            continue

        try:
            result[fields[0]] = int(fields[1])
        except ValueError:
            pass

    return result


def parse_time_row(line: str) -> TimeRow:
    """
    Parse a row of the TIME block: the hour, then pages, hits and
    bandwidth, then the same three again for not-viewed traffic.
    """
    fields = line.split()

    return {
        "hour": _get_int(fields, 0),
        "pages": _get_int(fields, 1),
        "hits": _get_int(fields, 2),
        "bandwidth": _get_int(fields, 3),
        "not_viewed_pages": _get_int(fields, 4),
        "not_viewed_hits": _get_int(fields, 5),
        "not_viewed_bandwidth": _get_int(fields, 6),
    }


def parse_day_row(line: str) -> DayRow:
    """
    Parse a row of the DAY block, e.g. ``20240131 120 456 78901 34``.
    """
    fields = line.split()

    return {
        "date": _get_field(fields, 0),
        "pages": _get_int(fields, 1),
        "hits": _get_int(fields, 2),
        "bandwidth": _get_int(fields, 3),
        "visits": _get_int(fields, 4),
    }


def parse_sider_row(line: str) -> PageCount:
    fields = line.split()

    return {
        "url": _get_field(fields, 0),
        "pages": _get_int(fields, 1),
        "bandwidth": _get_int(fields, 2),
        "entry": _get_int(fields, 3),
        "exit": _get_int(fields, 4),
    }


def parse_sider_404_row(line: str) -> MissingPage:
    fields = line.split()

    return {
        "url": _get_field(fields, 0),
        "hits": _get_int(fields, 1),
        "last_referer": _get_field(fields, 2),
    }
