"""
Tests for the indexmd CLI.

The LLM is never called: build_indexer is patched to return a
TreeIndexer wired with deterministic fakes.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import litellm
import pytest
import structlog
from click.testing import CliRunner

from indexmd import __version__
from indexmd.cli import (
    EXIT_AUTH_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_FAILED,
    EXIT_SUCCESS,
    EXIT_TIMEOUT,
    _error_exit_code,
    build_indexer,
    main,
)
from indexmd.config import AppConfig
from indexmd.indexer import FileSystem, NotFoundError, SummarizationError, TreeIndexer
from indexmd.summarizer import LLMContentSummarizer


class FakeContent:
    supported_extensions = frozenset({".py"})

    def __init__(self, error: Exception | None = None):
        self.error = error

    def summarize_file(self, file_name: str, raw_text: str) -> str:
        if self.error:
            raise self.error
        return f"### {file_name}"


class FakeIndex:
    def summarize_index(self, document_text: str) -> str:
        return "folder summary"


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.root.handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "pkg").mkdir(parents=True)
    (root / "main.py").write_text("print('hi')", encoding="utf-8")
    (root / "pkg" / "mod.py").write_text("x = 1", encoding="utf-8")
    return root


def _fake_builder(error: Exception | None = None):
    def _build(config: AppConfig) -> TreeIndexer:
        return TreeIndexer(
            FakeContent(error),
            FakeIndex(),
            index_file_name=config.indexer.index_file_name,
        )
    return _build


# ── Tests: index ──────────────────────────────────────────────────────────


class TestIndexCommand:
    def test_writes_documents(self, runner: CliRunner, tree: Path):
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder()):
            result = runner.invoke(main, ["index", str(tree), "--quiet"])

        assert result.exit_code == EXIT_SUCCESS
        assert (tree / ".Index.md").read_text(encoding="utf-8") == (
            "### main.py\n\n## folder : pkg\n\nfolder summary"
        )
        assert (tree / "pkg" / ".Index.md").exists()

    def test_custom_index_file(self, runner: CliRunner, tree: Path):
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder()):
            result = runner.invoke(main, ["index", str(tree), "--quiet", "--index-file", "INDEX.md"])

        assert result.exit_code == EXIT_SUCCESS
        assert (tree / "INDEX.md").exists()
        assert not (tree / ".Index.md").exists()

    def test_json_stats(self, runner: CliRunner, tree: Path):
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder()):
            result = runner.invoke(main, ["index", str(tree), "--quiet", "--json"])

        assert result.exit_code == EXIT_SUCCESS
        stats = json.loads(result.stdout)
        assert stats["directories_written"] == 2
        assert stats["files_summarized"] == 2
        assert stats["folders_folded"] == 1

    def test_missing_root(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["index", str(tmp_path / "missing"), "--quiet"])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_missing_config_file(self, runner: CliRunner, tree: Path, tmp_path: Path):
        result = runner.invoke(main, ["index", str(tree), "-c", str(tmp_path / "nope.yaml")])
        # click validates exists=True before the command runs
        assert result.exit_code != EXIT_SUCCESS

    def test_summarization_failure(self, runner: CliRunner, tree: Path):
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder(RuntimeError("boom"))):
            result = runner.invoke(main, ["index", str(tree), "--quiet"])

        assert result.exit_code == EXIT_FAILED
        assert "Indexing failed" in result.output
        assert not (tree / ".Index.md").exists()

    def test_auth_failure_exit_code(self, runner: CliRunner, tree: Path):
        error = RuntimeError("401 Unauthorized: invalid api key")
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder(error)):
            result = runner.invoke(main, ["index", str(tree), "--quiet"])

        assert result.exit_code == EXIT_AUTH_ERROR


    def test_timeout_exit_code(self, runner: CliRunner, tree: Path):
        error = RuntimeError("Request timed out after 60s")
        with patch("indexmd.cli.build_indexer", side_effect=_fake_builder(error)):
            result = runner.invoke(main, ["index", str(tree), "--quiet"])

        assert result.exit_code == EXIT_TIMEOUT

    def test_vanished_path_is_an_indexing_failure(self, runner: CliRunner, tree: Path):
        class VanishingFS(FileSystem):
            def list_dir(self, path: Path) -> list[str]:
                return super().list_dir(path) + ["gone.py"]

        def _build(config: AppConfig) -> TreeIndexer:
            return TreeIndexer(FakeContent(), FakeIndex(), fs=VanishingFS())

        with patch("indexmd.cli.build_indexer", side_effect=_build):
            result = runner.invoke(main, ["index", str(tree), "--quiet"])

        assert result.exit_code == EXIT_FAILED
        assert "Indexing failed (NotFoundError)" in result.output


class TestErrorExitCode:
    def test_provider_timeout_in_cause_chain(self):
        timeout = litellm.Timeout(message="deadline exceeded", model="gpt-4o-mini", llm_provider="openai")
        try:
            raise SummarizationError("Failed to summarize a.py") from timeout
        except SummarizationError as e:
            assert _error_exit_code(e) == EXIT_TIMEOUT

    def test_timeout_message(self):
        assert _error_exit_code(SummarizationError("Request timed out")) == EXIT_TIMEOUT

    def test_auth_message(self):
        assert _error_exit_code(SummarizationError("Invalid API key provided")) == EXIT_AUTH_ERROR

    def test_other_errors_are_plain_failures(self):
        assert _error_exit_code(NotFoundError("Path does not exist: x")) == EXIT_FAILED


# ── Tests: other commands ─────────────────────────────────────────────────


class TestOtherCommands:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert __version__ in result.output

    def test_validate_config(self, runner: CliRunner, tmp_path: Path):
        config = tmp_path / "config.yaml"
        config.write_text("llm:\n  model: my-model\n", encoding="utf-8")
        result = runner.invoke(main, ["validate-config", "-c", str(config)])
        assert result.exit_code == EXIT_SUCCESS
        assert "my-model" in result.output

    def test_validate_config_invalid(self, runner: CliRunner, tmp_path: Path):
        config = tmp_path / "config.yaml"
        config.write_text("indexer:\n  listing_order: random\n", encoding="utf-8")
        result = runner.invoke(main, ["validate-config", "-c", str(config)])
        assert result.exit_code == EXIT_FAILED

    def test_cache_stats_and_clear(self, runner: CliRunner, tmp_path: Path):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "abc.json").write_text("{}", encoding="utf-8")
        config = tmp_path / "config.yaml"
        config.write_text(f"llm_cache:\n  dir: {cache_dir}\n", encoding="utf-8")

        stats = runner.invoke(main, ["cache", "stats", "-c", str(config)])
        assert "Entries: 1" in stats.output

        cleared = runner.invoke(main, ["cache", "clear", "-c", str(config)])
        assert "Deleted 1" in cleared.output
        assert not (cache_dir / "abc.json").exists()


# ── Tests: wiring ─────────────────────────────────────────────────────────


class TestBuildIndexer:
    def test_config_flows_into_indexer(self):
        config = AppConfig(
            indexer={
                "index_file_name": "INDEX.md",
                "listing_order": "filesystem",
                "supported_extensions": [".py"],
                "follow_symlinks": True,
            },
        )
        indexer = build_indexer(config)

        assert isinstance(indexer.content_summarizer, LLMContentSummarizer)
        assert indexer.index_file_name == "INDEX.md"
        assert indexer.listing_order == "filesystem"
        assert indexer.supported_extensions == frozenset({".py"})
        assert indexer.follow_symlinks is True
