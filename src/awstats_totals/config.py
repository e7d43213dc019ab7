"""
Settings for the totals report and the AWStats wrapper.

These are read from the Flask config, which in turn can be populated
from environment variables with the ``AWSTATS_TOTALS_`` prefix, e.g.

    AWSTATS_TOTALS_DATA_DIR=/var/lib/awstats
    AWSTATS_TOTALS_FILTER_CONFIGS='["example.com", "example.net"]'

The settings are read once per request and never modified.
"""

from collections.abc import Iterable, Mapping
import dataclasses
import pathlib
import typing

from .types import NotViewedMode


NOT_VIEWED_MODES: tuple[NotViewedMode, ...] = ("ignore", "columns", "sum")

# The columns you can sort the report by.
SORT_COLUMNS = (
    "config",
    "unique",
    "visits",
    "pages",
    "hits",
    "bandwidth",
    "not_viewed_pages",
    "not_viewed_hits",
    "not_viewed_bandwidth",
)


def parse_config_list(value: str | Iterable[str]) -> frozenset[str]:
    """
    Parse a list of sites from the config.

    This is usually a list, but an environment variable which isn't valid
    JSON arrives as a plain string, e.g. ``example.com,example.net``.
    """
    if isinstance(value, str):
        return frozenset(v.strip() for v in value.split(",") if v.strip())

    return frozenset(value)


@dataclasses.dataclass(frozen=True)
class Settings:
    data_dir: pathlib.Path = pathlib.Path("/var/lib/awstats")
    lang_dir: pathlib.Path = pathlib.Path("/usr/share/awstats/lang")
    awstats_url: str = "/cgi-bin/awstats.pl"
    awstats_file: pathlib.Path = pathlib.Path("/usr/local/awstats/cgi-bin/awstats.pl")
    lang: str = "auto"
    not_viewed: NotViewedMode = "sum"
    sort_default: str = "bandwidth"
    dec_point: str = "."
    thousands_sep: str = " "

    # If ``filter_configs`` is non-empty, only these sites are shown.
    # Sites in ``filter_ignore_configs`` are never shown.
    filter_configs: frozenset[str] = frozenset()
    filter_ignore_configs: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if self.not_viewed not in NOT_VIEWED_MODES:
            raise ValueError(f"Unrecognised not-viewed mode: {self.not_viewed!r}")

    @classmethod
    def from_mapping(cls, config: Mapping[str, typing.Any]) -> "Settings":
        """
        Build the settings from a Flask config.  Any key which isn't
        set keeps its default value.
        """
        defaults = cls()

        return cls(
            data_dir=pathlib.Path(config.get("DATA_DIR", defaults.data_dir)),
            lang_dir=pathlib.Path(config.get("LANG_DIR", defaults.lang_dir)),
            awstats_url=config.get("AWSTATS_URL", defaults.awstats_url),
            awstats_file=pathlib.Path(
                config.get("AWSTATS_FILE", defaults.awstats_file)
            ),
            lang=config.get("LANG", defaults.lang),
            not_viewed=config.get("NOT_VIEWED", defaults.not_viewed),
            sort_default=config.get("SORT_DEFAULT", defaults.sort_default),
            dec_point=config.get("DEC_POINT", defaults.dec_point),
            thousands_sep=config.get("THOUSANDS_SEP", defaults.thousands_sep),
            filter_configs=parse_config_list(config.get("FILTER_CONFIGS", ())),
            filter_ignore_configs=parse_config_list(
                config.get("FILTER_IGNORE_CONFIGS", ())
            ),
        )
