"""Unit test configuration - small corpora and isolated environment"""

import pytest

from devops_kb.bm25 import BM25Index

KB_ENV_VARS = [
    "KB_PATTERNS_DIR",
    "KB_KNOWLEDGE_DIR",
    "KB_EXTRA_SOURCES_DIR",
    "KB_PATTERNS_INDEX",
    "KB_KNOWLEDGE_INDEX",
    "KB_RESULT_LIMIT",
    "KB_STRICT_LOAD",
    "KB_LOG_FILE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_kb_environment(monkeypatch):
    """
    Unit tests never depend on the developer's shell or .env files.

    Settings are read from os.environ at call time, so clearing the
    variables here is enough for every test to start from defaults.
    """
    for name in KB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def three_doc_index():
    """Ranking scenario corpus: two deploy docs and one unrelated doc"""
    index = BM25Index()
    index.add_document(1, "deploy cloud run service", {"source": "patterns/run.md"})
    index.add_document(2, "deploy cloud build trigger", {"source": "patterns/build.md"})
    index.add_document(3, "storage bucket upload", {"source": "patterns/storage.md"})
    return index


@pytest.fixture
def corpus_dirs(tmp_path):
    """
    On-disk corpus layout used by loader, CLI and client tests:

        patterns/cloud-run.md
        patterns/nested/canary.md
        knowledge/cloudbuild.md
        knowledge/storage.txt
        .document-sources/artifact-registry.md
    """
    patterns = tmp_path / "patterns"
    (patterns / "nested").mkdir(parents=True)
    (patterns / "cloud-run.md").write_text("Deploy a container to Cloud Run with gcloud run deploy.")
    (patterns / "nested" / "canary.md").write_text("Canary release pattern: split traffic between revisions.")

    knowledge = tmp_path / "knowledge"
    knowledge.mkdir()
    (knowledge / "cloudbuild.md").write_text(
        "To create a Cloud Build config, write a cloudbuild.yaml file listing build steps."
    )
    (knowledge / "storage.txt").write_text("Upload objects to a Cloud Storage bucket with gsutil cp.")

    extra = tmp_path / ".document-sources"
    extra.mkdir()
    (extra / "artifact-registry.md").write_text("Push images to Artifact Registry before deploying.")

    return {"root": tmp_path, "patterns": patterns, "knowledge": knowledge, "extra": extra}
