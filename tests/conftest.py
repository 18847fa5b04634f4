"""Shared test fixtures for cadr."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from cadr.config.models import AnalysisConfig
from cadr.llm.base import LLMProvider
from cadr.vcs.git import GitClient


SAMPLE_DIFF = """\
diff --git a/src/db.py b/src/db.py
index 1111111..2222222 100644
--- a/src/db.py
+++ b/src/db.py
@@ -1,2 +1,3 @@
 import sqlite3
+import psycopg
 DB_URL = "sqlite://"
"""


@pytest.fixture
def sample_config():
    return AnalysisConfig(
        provider="openai",
        analysis_model="gpt-4",
        api_key_env="CADR_TEST_API_KEY",
        timeout_seconds=15,
    )


@pytest.fixture
def api_key(monkeypatch, sample_config):
    monkeypatch.setenv(sample_config.api_key_env, "sk-test-123")
    return "sk-test-123"


@pytest.fixture
def no_api_key(monkeypatch, sample_config):
    monkeypatch.delenv(sample_config.api_key_env, raising=False)


@pytest.fixture
def mock_llm_provider():
    """Provider double whose analyze() returns a significant JSON verdict."""
    provider = MagicMock(spec=LLMProvider)
    provider.name = "openai"
    provider.analyze = AsyncMock(
        return_value='{"is_significant": true, "reason": "Adds PostgreSQL driver", "confidence": 0.9}'
    )
    return provider


@pytest.fixture
def mock_git():
    git = MagicMock(spec=GitClient)
    git.list_changed_files = AsyncMock(return_value=["src/db.py"])
    git.get_diff_text = AsyncMock(return_value=SAMPLE_DIFF)
    return git


@pytest.fixture
def adr_dir(tmp_path):
    return tmp_path / "docs" / "adr"


@pytest.fixture
def config_file(tmp_path):
    """Write a valid cadr.yaml and return its path."""
    path = tmp_path / "cadr.yaml"
    path.write_text(
        "provider: openai\n"
        "analysis_model: gpt-4\n"
        "api_key_env: CADR_TEST_API_KEY\n"
        "timeout_seconds: 15\n",
        encoding="utf-8",
    )
    return path
