"""
Pass query parameters through to ``awstats.pl``.

This lets you set ``WrapperScript`` in your AWStats config to point at
this app, so AWStats is never exposed to the web directly.  Only the
parameters below are passed through, and only if they look sensible --
anything else is silently dropped.
"""

from collections.abc import Mapping
import pathlib
import re
import subprocess


class MissingConfig(Exception):
    """
    Thrown if the request doesn't have a usable ``config`` parameter.
    """

    pass


CONFIG_PATTERN = re.compile(r"[-.a-z0-9]+", flags=re.IGNORECASE)

# (name, pattern, always include)
PARAMETERS: list[tuple[str, re.Pattern[str], bool]] = [
    ("output", re.compile(r"[a-z0-9]+"), True),
    ("year", re.compile(r"\d{4}"), False),
    ("month", re.compile(r"\d{1,2}|all"), False),
    ("lang", re.compile(r"[a-z]{2}"), False),
]

FILTER_PARAMETERS = [
    "hostfilter",
    "hostfilterex",
    "urlfilter",
    "urlfilterex",
    "refererpagesfilter",
    "refererpagesfilterex",
    "filterrawlog",
]

FILTER_PATTERN = re.compile(r"[^;:,`| ]+")


def get_param(
    args: Mapping[str, str], name: str, pattern: re.Pattern[str], always: bool = False
) -> list[str]:
    """
    Return the command-line argument for a single query parameter, e.g.
    ``["-year=2024"]``, or an empty list if it's missing or invalid.

    If ``always`` is True, the bare flag is passed even if the value
    is missing, e.g. ``["-output"]``.
    """
    value = args.get(name)

    if value is not None and pattern.fullmatch(value):
        return [f"-{name}={value}"]
    elif always:
        return [f"-{name}"]
    else:
        return []


def build_awstats_args(args: Mapping[str, str]) -> list[str]:
    """
    Turn the query parameters into a list of arguments for ``awstats.pl``.

    This will throw a ``MissingConfig`` exception if there's no
    valid ``config`` parameter, because AWStats can't do anything
    useful without one.
    """
    result = get_param(args, "config", CONFIG_PATTERN)

    if not result:
        raise MissingConfig()

    for name, pattern, always in PARAMETERS:
        result += get_param(args, name, pattern, always)

    for name in FILTER_PARAMETERS:
        result += get_param(args, name, FILTER_PATTERN)

    return result


def run_awstats(awstats_file: pathlib.Path, args: list[str]) -> bytes:
    """
    Run ``awstats.pl`` with the given arguments, and return its output.

    The arguments are passed directly to the process rather than through
    a shell, so they can't be used to run other commands.
    """
    if not awstats_file.is_file():
        raise FileNotFoundError(awstats_file)

    proc = subprocess.run(
        ["perl", str(awstats_file), *args], capture_output=True, check=False
    )

    return proc.stdout
