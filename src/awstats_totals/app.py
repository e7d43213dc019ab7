import datetime
import re

from flask import abort, Flask, g, render_template, request
from flask import Response as FlaskResponse
import hyperlink

from . import date_helpers
from .config import Settings
from .database import AWStatsDatabase
from .formatting import byte_format, num_format
from .lang import load_messages, resolve_lang
from .report import (
    build_report,
    empty_totals,
    get_available_years,
    normalise_sort,
)
from .types import Month
from .wrapper import build_awstats_args, MissingConfig, run_awstats


app = Flask(__name__)

app.config.from_prefixed_env("AWSTATS_TOTALS")


def get_settings() -> Settings:
    """
    Return the settings for the current request.
    """
    if "settings" not in g:
        g.settings = Settings.from_mapping(app.config)

    return g.settings  # type: ignore[no-any-return]


def get_year() -> int:
    """
    Get the year from the query parameters, or the current year if
    it's missing or doesn't look like a year.
    """
    year = request.args.get("year", "")

    if (
        re.fullmatch(r"\d{4}", year)
        and datetime.MINYEAR <= int(year) <= datetime.MAXYEAR
    ):
        return int(year)
    else:
        return date_helpers.this_year()


def get_month() -> Month:
    """
    Get the month from the query parameters.  Anything that isn't
    a month from 1 to 12 means "all months".
    """
    month = request.args.get("month", "")

    if re.fullmatch(r"\d{1,2}", month) and 1 <= int(month) <= 12:
        return int(month)
    else:
        return "all"


def get_sort() -> str:
    sort = request.args.get("sort", "")

    if not re.fullmatch(r"[a-z_]+", sort):
        sort = ""

    return normalise_sort(get_settings(), sort)


def get_awstats_url(config: str, year: int, month: Month) -> str:
    """
    Return a link to the AWStats page for a site, e.g.

        /cgi-bin/awstats.pl?config=example.com&year=2024&month=01

    """
    u = hyperlink.URL.from_text(get_settings().awstats_url)

    u = u.add("config", config).add("year", str(year))

    if month == "all":
        u = u.add("month", "all")
    else:
        u = u.add("month", f"{month:02d}")

    return u.to_text()


def format_number(number: int | float | None, decimals: int = 0) -> str:
    settings = get_settings()

    return num_format(
        number,
        decimals,
        dec_point=settings.dec_point,
        thousands_sep=settings.thousands_sep,
    )


def format_bytes(number: int | float | None, decimals: int = 2) -> str:
    settings = get_settings()

    return byte_format(
        number,
        decimals,
        dec_point=settings.dec_point,
        thousands_sep=settings.thousands_sep,
    )


app.jinja_env.filters["num_format"] = format_number
app.jinja_env.filters["byte_format"] = format_bytes
app.jinja_env.globals["awstats_url"] = get_awstats_url


def get_columns(messages: dict[int, str]) -> list[tuple[str, str]]:
    """
    Return the (key, label) of each value column in the totals table.
    """
    columns = [
        ("unique", messages[11]),
        ("visits", messages[10]),
        ("pages", messages[56]),
        ("hits", messages[57]),
        ("bandwidth", messages[75]),
    ]

    if get_settings().not_viewed == "columns":
        columns += [
            ("not_viewed_pages", messages[56]),
            ("not_viewed_hits", messages[57]),
            ("not_viewed_bandwidth", messages[75]),
        ]

    return columns


@app.route("/")
def totals() -> str:
    settings = get_settings()

    year = get_year()
    month = get_month()
    sort = get_sort()

    messages = load_messages(settings.lang_dir, settings.lang)

    if AWStatsDatabase(settings.data_dir).exists():
        error = None
        rows, report_totals = build_report(settings, year, month, sort)
        years = get_available_years(settings)
    else:
        app.logger.warning("AWStats data directory %s not found", settings.data_dir)
        error = f"Could not find the AWStats data directory {settings.data_dir}"
        rows, report_totals = [], empty_totals()
        years = []

    if year not in years:
        years = sorted(years + [year], reverse=True)

    return render_template(
        "totals.html",
        lang=resolve_lang(settings.lang),
        messages=messages,
        error=error,
        year=year,
        month=month,
        sort=sort,
        years=years,
        not_viewed=settings.not_viewed,
        columns=get_columns(messages),
        rows=rows,
        totals=report_totals,
    )


@app.route("/site/<config>/")
def site(config: str) -> str:
    """
    Show the traffic for a single site: either every month in a year,
    or every day in a month with the most popular/missing pages.
    """
    settings = get_settings()

    if config in settings.filter_ignore_configs or (
        settings.filter_configs and config not in settings.filter_configs
    ):
        abort(404)

    year = get_year()
    month = get_month()

    db = AWStatsDatabase(settings.data_dir)

    if month == "all":
        year_data = db.get_year_data(config, year)
        month_data = {}
        top_pages = []
        missing_pages = []
    else:
        year_data = {}
        month_data = db.get_month_data(config, year, month)
        top_pages = db.get_top_pages(config, year, month)
        missing_pages = db.get_missing_pages(config, year, month)

    return render_template(
        "site.html",
        lang=resolve_lang(settings.lang),
        messages=load_messages(settings.lang_dir, settings.lang),
        config=config,
        year=year,
        month=month,
        year_data=year_data,
        month_data=month_data,
        top_pages=top_pages,
        missing_pages=missing_pages,
    )


@app.route("/awstats")
def awstats() -> FlaskResponse:
    """
    Run ``awstats.pl`` with the (validated) query parameters.
    """
    try:
        args = build_awstats_args(request.args)
    except MissingConfig:
        abort(400, "config parameter not set!")

    awstats_file = get_settings().awstats_file

    try:
        output = run_awstats(awstats_file, args)
    except FileNotFoundError:
        app.logger.error("Could not find AWStats script at %s", awstats_file)
        abort(500)

    return FlaskResponse(output, mimetype="text/html")
