"""
Tests for the main Flask app.
"""

from collections.abc import Callable
import pathlib
import subprocess
import typing

from flask.testing import FlaskClient
import pytest

from awstats_totals.date_helpers import this_year


WriteDataFile = Callable[..., pathlib.Path]


@pytest.fixture
def two_sites(write_data_file: WriteDataFile) -> None:
    """
    Create data files for two sites: one with two months of data in
    2024, one with a single month.
    """
    write_data_file(
        "siteA",
        2024,
        1,
        visits=10,
        unique=5,
        time_rows=["0 1 2 300 0 0 0", "1 4 5 600 0 0 0"],
    )
    write_data_file(
        "siteA", 2024, 2, visits=20, unique=7, time_rows=["0 10 20 3000 2 3 400"]
    )
    write_data_file(
        "siteB",
        2024,
        2,
        visits=1,
        unique=1,
        time_rows=["0 1 1 1 0 0 0"],
        day_rows=["20240203 1 1 1 1"],
        sider_rows=["/popular-page/ 1 1 1 1"],
        sider_404_rows=["/wp-login.php 12 -"],
    )


class TestTotals:
    """
    Tests for the totals report at ``/``.
    """

    @pytest.mark.usefixtures("two_sites")
    def test_it_shows_the_totals_for_a_year(self, client: FlaskClient) -> None:
        """
        If you don't pick a month, you get the totals for the whole year,
        with both months of siteA in a single row.
        """
        client.application.config["NOT_VIEWED"] = "ignore"

        resp = client.get("/", query_string={"year": "2024"})
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        assert html.count(">siteA</a>") == 1
        assert html.count(">siteB</a>") == 1

        # siteA: 15 pages, 27 hits, 3900 bytes
        assert "<td>15</td>" in html
        assert "<td>27</td>" in html
        assert "3.81 KB" in html

    @pytest.mark.usefixtures("two_sites")
    def test_it_links_to_awstats(self, client: FlaskClient) -> None:
        resp = client.get("/", query_string={"year": "2024", "month": "2"})
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        assert (
            'href="/cgi-bin/awstats.pl?config=siteA&amp;year=2024&amp;month=02"'
            in html
        )

    @pytest.mark.usefixtures("two_sites")
    def test_column_headers_are_sort_links(self, client: FlaskClient) -> None:
        resp = client.get("/", query_string={"year": "2024", "month": "2"})

        html = resp.get_data(as_text=True)
        for column in ["config", "unique", "visits", "pages", "hits", "bandwidth"]:
            assert f"sort={column}" in html

    @pytest.mark.usefixtures("two_sites")
    @pytest.mark.parametrize(
        ["sort", "first_site"],
        [("config", "siteA"), ("bandwidth", "siteA"), ("hits", "siteA")],
    )
    def test_it_sorts_the_rows(
        self, client: FlaskClient, sort: str, first_site: str
    ) -> None:
        resp = client.get("/", query_string={"year": "2024", "sort": sort})

        html = resp.get_data(as_text=True)
        assert html.index(f">{first_site}</a>") < html.index(">siteB</a>")

    @pytest.mark.usefixtures("two_sites")
    def test_config_sort_puts_sites_in_order(self, client: FlaskClient) -> None:
        client.application.config["SORT_DEFAULT"] = "config"

        resp = client.get("/", query_string={"year": "2024", "sort": "BAD-SORT!"})
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        assert html.index(">siteA</a>") < html.index(">siteB</a>")

    @pytest.mark.usefixtures("two_sites")
    def test_not_viewed_columns(self, client: FlaskClient) -> None:
        """
        If not-viewed traffic is shown in separate columns, there's a
        second row of headers to tell them apart.
        """
        client.application.config["NOT_VIEWED"] = "columns"

        resp = client.get("/", query_string={"year": "2024"})

        html = resp.get_data(as_text=True)
        assert "Viewed traffic" in html
        assert "Not viewed traffic" in html
        assert "sort=not_viewed_bandwidth" in html

    @pytest.mark.usefixtures("two_sites")
    @pytest.mark.parametrize("mode", ["ignore", "sum"])
    def test_not_viewed_columns_are_hidden(
        self, client: FlaskClient, mode: str
    ) -> None:
        client.application.config["NOT_VIEWED"] = mode

        resp = client.get("/", query_string={"year": "2024"})

        html = resp.get_data(as_text=True)
        assert "Not viewed traffic" not in html
        assert "sort=not_viewed_bandwidth" not in html

    def test_empty_data_dir_is_empty_table(self, client: FlaskClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        assert "<table>" in html
        assert "<tbody>" in html
        assert f'<option value="{this_year()}" selected>' in html

    def test_missing_data_dir_is_explained(
        self, client: FlaskClient, tmp_path: pathlib.Path
    ) -> None:
        """
        If the data directory doesn't exist, you get a message explaining
        the problem rather than an error.
        """
        client.application.config["DATA_DIR"] = tmp_path / "doesnotexist"

        resp = client.get("/")
        assert resp.status_code == 200
        assert b"Could not find the AWStats data directory" in resp.data

    def test_it_uses_the_language_file(
        self, client: FlaskClient, tmp_path: pathlib.Path
    ) -> None:
        lang_dir = tmp_path / "lang"
        lang_dir.mkdir()
        (lang_dir / "awstats-nl.txt").write_text("message10=Aantal bezoeken\n")

        client.application.config["LANG_DIR"] = lang_dir
        client.application.config["LANG"] = "nl"

        resp = client.get("/")

        html = resp.get_data(as_text=True)
        assert "Aantal bezoeken" in html
        assert '<html lang="nl">' in html

    @pytest.mark.usefixtures("two_sites")
    def test_it_uses_the_configured_separators(self, client: FlaskClient) -> None:
        client.application.config["DEC_POINT"] = ","
        client.application.config["NOT_VIEWED"] = "ignore"

        resp = client.get("/", query_string={"year": "2024"})

        assert "3,81 KB" in resp.get_data(as_text=True)

    @pytest.mark.usefixtures("two_sites")
    def test_filtered_sites_are_hidden(self, client: FlaskClient) -> None:
        client.application.config["FILTER_IGNORE_CONFIGS"] = ["siteB"]

        resp = client.get("/", query_string={"year": "2024"})

        html = resp.get_data(as_text=True)
        assert ">siteA</a>" in html
        assert ">siteB</a>" not in html


class TestSite:
    """
    Tests for the per-site page at ``/site/<config>/``.
    """

    @pytest.mark.usefixtures("two_sites")
    def test_year_shows_every_month(self, client: FlaskClient) -> None:
        resp = client.get("/site/siteA/", query_string={"year": "2024"})
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        for month_name in ["Jan", "Feb", "Jun", "Dec"]:
            assert f"{month_name} 2024" in html

    @pytest.mark.usefixtures("two_sites")
    def test_month_shows_every_day(self, client: FlaskClient) -> None:
        resp = client.get("/site/siteB/", query_string={"year": "2024", "month": "2"})
        assert resp.status_code == 200

        html = resp.get_data(as_text=True)
        assert "2024-02-01" in html
        assert "2024-02-29" in html
        assert "/popular-page/" in html
        assert "/wp-login.php" in html

    @pytest.mark.usefixtures("two_sites")
    @pytest.mark.parametrize(
        "query", [{"year": "0000"}, {"year": "0000", "month": "2"}]
    )
    def test_year_zero_is_current_year(
        self, client: FlaskClient, query: dict[str, str]
    ) -> None:
        """
        Year 0 can't be used as a date, so it's treated like any other
        invalid year.
        """
        resp = client.get("/site/siteA/", query_string=query)
        assert resp.status_code == 200

        assert str(this_year()) in resp.get_data(as_text=True)

    @pytest.mark.usefixtures("two_sites")
    def test_filtered_site_is_not_found(self, client: FlaskClient) -> None:
        client.application.config["FILTER_CONFIGS"] = ["siteA"]

        resp = client.get("/site/siteB/", query_string={"year": "2024"})
        assert resp.status_code == 404


class TestAWStatsWrapper:
    """
    Tests for the wrapper around ``awstats.pl`` at ``/awstats``.
    """

    def test_missing_config_is_error(self, client: FlaskClient) -> None:
        resp = client.get("/awstats", query_string={"year": "2024"})
        assert resp.status_code == 400
        assert b"config parameter not set!" in resp.data

    def test_missing_script_is_error(self, client: FlaskClient) -> None:
        resp = client.get("/awstats", query_string={"config": "example.com"})
        assert resp.status_code == 500

    def test_it_returns_the_awstats_output(
        self,
        client: FlaskClient,
        tmp_path: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        (tmp_path / "awstats.pl").write_text("#!/usr/bin/perl\n")

        calls: list[list[str]] = []

        def fake_run(
            cmd: list[str], **kwargs: typing.Any
        ) -> subprocess.CompletedProcess[bytes]:
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout=b"<h1>AWStats</h1>")

        monkeypatch.setattr(subprocess, "run", fake_run)

        resp = client.get(
            "/awstats",
            query_string={"config": "example.com", "month": "all", "lang": "xyz"},
        )

        assert resp.status_code == 200
        assert resp.data == b"<h1>AWStats</h1>"
        assert resp.mimetype == "text/html"

        assert calls == [
            [
                "perl",
                str(tmp_path / "awstats.pl"),
                "-config=example.com",
                "-output",
                "-month=all",
            ]
        ]
