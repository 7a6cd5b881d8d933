"""
CLI Tests

Key Scenarios:
- Selection strings map 1-based numbers to scan indices
- ``scan --html`` lists records without launching a browser
- ``download`` with an empty selection exits non-zero

Usage:
    pytest tests/test_cli.py
"""

import argparse

import pytest

from gmaps_photos import cli
from gmaps_photos.downloader import ALL

PAGE = """
<html><body>
  <img src="https://lh3.googleusercontent.com/gps-cs/FIRST=w400-h300-no" alt="Lobby">
  <div data-lazy-src="https://lh4.googleusercontent.com/gps-cs/SECOND=w86-h86-k-no"></div>
</body></html>
"""


@pytest.mark.parametrize(
    "value,expected",
    [
        ("all", ALL),
        ("1", {0}),
        ("1, 3,,5", {0, 2, 4}),
    ],
)
def test_parse_selection(value, expected):
    assert cli.parse_selection(value) == expected


def test_parse_selection_rejects_garbage():
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_selection("1,two")


def test_parse_args_download_defaults():
    args = cli.parse_args(["download", "https://www.google.com/maps/contrib/123/photos"])
    assert args.command == "download"
    assert args.select == ALL
    assert args.delay == 1.0
    assert args.resolution == "s2048-v1"
    assert args.html is None


def test_parse_args_requires_a_source():
    with pytest.raises(SystemExit):
        cli.parse_args(["scan"])


def test_scan_from_saved_html(tmp_path, capsys):
    page = tmp_path / "contrib.html"
    page.write_text(PAGE, encoding="utf-8")

    cli.main(["scan", "--html", str(page), "--label", "Ann"])

    out = capsys.readouterr().out
    assert "1. Ann_gmaps_image_1_FIRST.jpg  [Lobby]" in out
    assert "2. Ann_gmaps_image_2_SECOND.jpg" in out


def test_download_with_empty_selection_exits_non_zero(tmp_path):
    page = tmp_path / "contrib.html"
    page.write_text(PAGE, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["download", "--html", str(page), "--select", "9", "--output", str(tmp_path / "out")])

    assert excinfo.value.code == 1
