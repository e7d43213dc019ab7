from collections.abc import Callable, Iterator
import pathlib
import typing

from flask.testing import FlaskClient
import pytest

from awstats_totals.database import data_filename


WriteDataFile = Callable[..., pathlib.Path]


def create_data_file_contents(
    *,
    visits: int | None = None,
    unique: int | None = None,
    time_rows: list[str] | None = None,
    day_rows: list[str] | None = None,
    sider_rows: list[str] | None = None,
    sider_404_rows: list[str] | None = None,
) -> str:
    """
    Create the text of an AWStats database file for testing.

    This only includes the blocks we read, but is otherwise laid out
    the way AWStats writes them.
    """
    lines = [
        "AWSTATS DATA FILE 7.9 (build 20230108)",
        "",
        "# If you remove this file, all statistics for date will be lost/reset.",
        "",
    ]

    general = ["LastLine 20240131235959 1234 5678 9012"]
    if visits is not None:
        general.append(f"TotalVisits {visits}")
    if unique is not None:
        general.append(f"TotalUnique {unique}")

    blocks = [
        ("GENERAL", general),
        ("TIME", time_rows or []),
        ("DAY", day_rows or []),
        ("SIDER", sider_rows or []),
        ("SIDER_404", sider_404_rows or []),
    ]

    for name, rows in blocks:
        lines.append(f"BEGIN_{name} {len(rows)}")
        lines.extend(rows)
        lines.append(f"END_{name}")
        lines.append("")

    return "\n".join(lines)


@pytest.fixture
def data_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """
    Create an empty AWStats data directory.
    """
    path = tmp_path / "awstats"
    path.mkdir()
    return path


@pytest.fixture
def write_data_file(data_dir: pathlib.Path) -> WriteDataFile:
    """
    Returns a function that writes an AWStats database file for a
    site/month into the data directory, e.g.

        write_data_file("example.com", 2024, 1, visits=10, time_rows=[…])

    Pass ``subdir`` to put the file in a subdirectory.
    """

    def _write(
        config: str,
        year: int,
        month: int,
        *,
        subdir: str | None = None,
        **kwargs: typing.Any,
    ) -> pathlib.Path:
        parent = data_dir / subdir if subdir else data_dir
        parent.mkdir(parents=True, exist_ok=True)

        path = parent / data_filename(config, year, month)
        path.write_text(create_data_file_contents(**kwargs))
        return path

    return _write


@pytest.fixture()
def client(data_dir: pathlib.Path, tmp_path: pathlib.Path) -> Iterator[FlaskClient]:
    """
    Creates an instance of the app for use in testing.

    See https://flask.palletsprojects.com/en/3.0.x/testing/#fixtures
    """
    from awstats_totals import app

    original_config = dict(app.config)

    app.config["TESTING"] = True
    app.config["DATA_DIR"] = data_dir
    app.config["LANG_DIR"] = tmp_path / "lang"
    app.config["AWSTATS_FILE"] = tmp_path / "awstats.pl"

    with app.test_client() as client:
        yield client

    # Reset to prevent this leaking between tests
    app.config.clear()
    app.config.update(original_config)
