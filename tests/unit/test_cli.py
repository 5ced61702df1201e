"""
Unit tests for the index builder command line.
"""

import pytest
from devops_kb import cli
from devops_kb.bm25 import SearchResult, load_index


@pytest.fixture
def cli_env(corpus_dirs, monkeypatch):
    """Point every KB_* path at the temporary corpus and silence log setup"""
    root = corpus_dirs["root"]
    monkeypatch.setenv("KB_PATTERNS_DIR", str(corpus_dirs["patterns"]))
    monkeypatch.setenv("KB_KNOWLEDGE_DIR", str(corpus_dirs["knowledge"]))
    monkeypatch.setenv("KB_EXTRA_SOURCES_DIR", str(corpus_dirs["extra"]))
    monkeypatch.setenv("KB_PATTERNS_INDEX", str(root / "out" / "patterns_index.bm25"))
    monkeypatch.setenv("KB_KNOWLEDGE_INDEX", str(root / "out" / "knowledge_index.bm25"))
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "load_env_files", lambda: None)
    return root


class TestBuildCommand:
    """Test the build command"""

    def test_build_writes_both_indices(self, cli_env, capsys):
        assert cli.main(["build"]) == 0

        patterns = load_index(cli_env / "out" / "patterns_index.bm25")
        knowledge = load_index(cli_env / "out" / "knowledge_index.bm25")
        assert patterns.doc_count == 2
        assert knowledge.doc_count == 3

        out = capsys.readouterr().out
        assert "Patterns index saved to" in out
        assert "Knowledge index saved to" in out
        assert "Test Search Query: 'how to create a cloud build yaml'" in out
        assert "cloudbuild.yaml" in out

    def test_build_save_failure(self, cli_env, monkeypatch, capsys):
        """Test an unwritable index path gives exit status 1"""
        blocker = cli_env / "blocker"
        blocker.write_text("")
        monkeypatch.setenv("KB_PATTERNS_INDEX", str(blocker / "patterns_index.bm25"))

        assert cli.main(["build"]) == 1
        out = capsys.readouterr().out
        assert "Patterns index saved" not in out
        assert "Knowledge index saved to" in out


class TestQueryCommand:
    """Test the query command"""

    def test_query_after_build(self, cli_env, capsys):
        cli.main(["build"])
        capsys.readouterr()

        assert cli.main(["query", "patterns", "canary", "traffic"]) == 0
        out = capsys.readouterr().out
        assert "Search Query: 'canary traffic'" in out
        assert "Canary release pattern" in out

    def test_query_missing_index(self, cli_env):
        assert cli.main(["query", "knowledge", "cloud"]) == 1

    def test_query_unknown_corpus(self, cli_env, capsys):
        assert cli.main(["query", "recipes", "cloud"]) == 1
        assert "Unknown index: recipes" in capsys.readouterr().out

    def test_query_without_text(self, cli_env, capsys):
        assert cli.main(["query", "patterns"]) == 1
        assert "Usage:" in capsys.readouterr().out


class TestDispatch:
    """Test argument handling"""

    def test_no_arguments(self, capsys):
        assert cli.main([]) == 1
        assert "Usage: devops-kb <command>" in capsys.readouterr().out

    def test_unknown_command(self, cli_env, capsys):
        assert cli.main(["rag"]) == 1
        assert "Unknown command: rag" in capsys.readouterr().out


class TestPrintResults:
    """Test the result table"""

    def test_long_content_truncated_to_one_line(self, capsys):
        text = "line one\n" + "x" * 200
        cli.print_results([SearchResult(doc_id=1, score=1.23456, text=text)])

        row = capsys.readouterr().out.splitlines()[-1]
        assert row.startswith("1     | 1.2346     | line one x")
        assert row.endswith("...")
        assert len(row.split(" | ", 2)[2]) == 100

    def test_empty_results(self, capsys):
        cli.print_results([])
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 3
