"""Tests for the command-line interface."""

from typer.testing import CliRunner

from .main import _parse_value, app

runner = CliRunner()


def test_parse_value():
    """Test command-line values are typed."""
    assert _parse_value("7") == 7
    assert _parse_value("2.5") == 2.5
    assert _parse_value("1,2") == [1, 2]
    assert _parse_value("badgers") == "badgers"


def test_translate_prints_options():
    """Test translated filters and order are shown."""
    result = runner.invoke(
        app,
        ["translate", "badgers", "--filter", "views__gte=7", "--order", "views:desc"],
    )
    assert result.exit_code == 0
    assert "'badgers'" in result.output
    assert ">= 7" in result.output
    assert "views DESC" in result.output


def test_translate_resolves_pages():
    """Test --page produces limit/offset."""
    result = runner.invoke(app, ["translate", "badgers", "--page", "3", "--per-page", "5"])
    assert result.exit_code == 0
    assert "offset" in result.output
    assert "10" in result.output
    assert "page 3" in result.output


def test_translate_shows_facets():
    """Test facets are rendered as a tree."""
    result = runner.invoke(app, ["translate", "badgers", "--facet", "popular=views__gt=10"])
    assert result.exit_code == 0
    assert "popular" in result.output
    assert "> 10" in result.output


def test_translate_rejects_bad_operator():
    """Test unsupported operators exit with an error."""
    result = runner.invoke(app, ["translate", "badgers", "--filter", "views__like=7"])
    assert result.exit_code == 1
    assert "like" in result.output


def test_version():
    """Test version output."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "SphinxBridge v" in result.output
