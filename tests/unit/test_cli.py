"""Unit tests for the command line entry point."""

import io

from rich.console import Console
import pytest

from ja_search_repro import cli
from ja_search_repro.ui.app import SearchReproApp


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def logging_calls(monkeypatch):
    calls = []

    def _configure(level, json_output, **kwargs):
        calls.append({"level": level, "json_output": json_output, **kwargs})

    monkeypatch.setattr(cli, "configure_logging", _configure)
    return calls


def _output(console: Console) -> str:
    return console.file.getvalue()


@pytest.mark.unit
class TestArgumentParser:
    def test_defaults(self):
        args = cli.build_argument_parser().parse_args([])

        assert args.doc == []
        assert args.query is None
        assert args.tokenizer is None
        assert not args.plain_logs

    def test_repeatable_documents(self):
        args = cli.build_argument_parser().parse_args(["--doc", "東京", "--doc", "大阪"])

        assert args.doc == ["東京", "大阪"]

    def test_rejects_unknown_tokenizer(self):
        with pytest.raises(SystemExit):
            cli.build_argument_parser().parse_args(["--tokenizer", "mecab"])


@pytest.mark.unit
class TestHeadlessQuery:
    def test_prints_tokens_and_results(self, console, logging_calls):
        exit_code = cli.main(
            ["--tokenizer", "ngram", "--doc", "東京タワー", "--doc", "大阪城", "--query", "東京"],
            console=console,
        )

        output = _output(console)
        assert exit_code == 0
        assert "Tokens: 東, 京, 東京" in output
        assert "1 document matched" in output
        assert "Document 1" in output
        assert "東京タワー" in output
        assert "大阪城" not in output

    def test_query_error(self, console, logging_calls):
        exit_code = cli.main(["--doc", "東京", "--query", "foo:bar"], console=console)

        output = _output(console)
        assert exit_code == 1
        assert "Error searching: unrecognised field 'foo'" in output
        assert "0 results" in output

    def test_blank_documents_are_skipped(self, console, logging_calls):
        exit_code = cli.main(["--tokenizer", "ngram", "--doc", "   ", "--query", "東京"], console=console)

        assert exit_code == 0
        assert "0 documents matched" in _output(console)

    def test_blank_query_reports_document_count(self, console, logging_calls):
        exit_code = cli.main(["--doc", "東京", "--doc", "大阪", "--query", ""], console=console)

        assert exit_code == 0
        assert "2 documents indexed" in _output(console)

    def test_invalid_configuration(self, console, logging_calls):
        exit_code = cli.main(
            ["--tokenizer", "ngram", "--min-gram", "5", "--max-gram", "2", "--query", "東京"],
            console=console,
        )

        assert exit_code == 2
        assert "Invalid configuration" in _output(console)
        assert logging_calls == []

    def test_logging_options(self, console, logging_calls, tmp_path):
        log_file = tmp_path / "search.log"

        cli.main(
            ["--query", "東京", "--log-level", "debug", "--log-file", str(log_file), "--plain-logs"],
            console=console,
        )

        assert logging_calls == [{"level": "debug", "json_output": False, "log_file": log_file}]


@pytest.mark.unit
class TestInteractive:
    def test_launches_app_with_documents(self, monkeypatch, console, logging_calls):
        launched = []
        monkeypatch.setattr(SearchReproApp, "run", lambda self: launched.append(self))

        exit_code = cli.main(["--tokenizer", "ngram", "--doc", "東京"], console=console)

        assert exit_code == 0
        (app,) = launched
        assert app.session.settings.search_tokenizer == "ngram"
        assert dict(app._initial_documents) == {"Document 1": "東京"}
        assert "handler" in logging_calls[0]

    def test_log_file_replaces_devtools_handler(self, monkeypatch, console, logging_calls, tmp_path):
        monkeypatch.setattr(SearchReproApp, "run", lambda self: None)

        cli.main(["--log-file", str(tmp_path / "tui.log")], console=console)

        assert logging_calls[0]["log_file"] == tmp_path / "tui.log"
        assert "handler" not in logging_calls[0]
