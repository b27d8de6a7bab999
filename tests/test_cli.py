"""Tests for the Typer CLI commands that need no model server."""

from __future__ import annotations

from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


class TestClassifyCommand:
    def test_retrieval_question(self):
        result = runner.invoke(app, ["classify", "Why am I always tired?"])
        assert result.exit_code == 0
        assert "Path: retrieval" in result.output
        assert "Generation: narrative" in result.output

    def test_calculation_question(self):
        result = runner.invoke(app, ["classify", "How much did I spend on food this month?"])
        assert result.exit_code == 0
        assert "Path: calculation" in result.output
        assert "Operations: sum" in result.output
        assert "LLM stage ran: False" in result.output


class TestStatusCommand:
    def test_lists_components(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "life-butler-rag" in result.output
        assert "ollama" in result.output


def test_no_args_shows_help():
    result = runner.invoke(app, [])
    assert "classify" in result.output
