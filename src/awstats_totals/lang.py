"""
Load the labels for the report from an AWStats language file.

AWStats ships a file per language (e.g. ``awstats-nl.txt``) with lines
like ``message10=Number of visits``.  We use the same message numbers
as AWStats itself, so the report matches the rest of your AWStats pages.
"""

import logging
import pathlib
import re


logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: dict[int, str] = {
    5: "Month",
    6: "Year",
    7: "Statistics for",
    10: "Number of visits",
    11: "Unique visitors",
    56: "Pages",
    57: "Hits",
    60: "Jan",
    61: "Feb",
    62: "Mar",
    63: "Apr",
    64: "May",
    65: "Jun",
    66: "Jul",
    67: "Aug",
    68: "Sep",
    69: "Oct",
    70: "Nov",
    71: "Dec",
    75: "Bandwidth",
    102: "Total",
    115: "OK",
    133: "Reported period",
    160: "Viewed traffic",
    161: "Not viewed traffic",
}

MESSAGE_LINE = re.compile(r"message(\d+)=(.*)")


def resolve_lang(lang: str) -> str:
    """
    Return the language code to use for a configured language.

    ``auto`` would normally mean "whatever the browser asks for", but
    we always treat it as English.
    """
    if lang == "auto" or not re.fullmatch(r"[a-z_]+", lang):
        return "en"

    return lang


def parse_messages(text: str) -> dict[int, str]:
    """
    Parse the ``messageNNN=...`` lines of a language file.
    """
    messages = {}

    for line in text.splitlines():
        m = MESSAGE_LINE.fullmatch(line.strip())
        if m is not None:
            messages[int(m.group(1))] = m.group(2)

    return messages


def load_messages(lang_dir: pathlib.Path, lang: str) -> dict[int, str]:
    """
    Return the messages for a language, falling back to the built-in
    English labels for anything the language file doesn't provide (or
    all of them, if there's no language file).
    """
    messages = dict(DEFAULT_MESSAGES)

    path = lang_dir / f"awstats-{resolve_lang(lang)}.txt"

    try:
        with open(path, encoding="utf-8", errors="replace") as in_file:
            messages.update(parse_messages(in_file.read()))
    except OSError:
        logger.debug("No language file at %s, using English labels", path)

    return messages
