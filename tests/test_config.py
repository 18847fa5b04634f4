"""Tests for cadr.config — model, YAML loader and writer."""

import os
import pytest
import yaml
from unittest.mock import patch
from pydantic import ValidationError

from cadr.config.models import AnalysisConfig, ConfigError, ConfigErrorKind
from cadr.config.loader import (
    _expand_env_vars,
    load_config,
    read_config,
    validate_config,
    write_config,
)


# ── AnalysisConfig ──────────────────────────────────────────────────

REQUIRED_FIELDS = ("provider", "analysis_model", "api_key_env", "timeout_seconds")


def _raw(**overrides):
    raw = {
        "provider": "openai",
        "analysis_model": "gpt-4",
        "api_key_env": "OPENAI_API_KEY",
        "timeout_seconds": 15,
    }
    raw.update(overrides)
    return raw


class TestAnalysisConfig:
    def test_full_config(self):
        cfg = AnalysisConfig(**_raw())
        assert cfg.provider == "openai"
        assert cfg.analysis_model == "gpt-4"
        assert cfg.api_key_env == "OPENAI_API_KEY"
        assert cfg.timeout_seconds == 15
        assert cfg.ignore_patterns is None

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_required_field_missing(self, field):
        raw = _raw()
        del raw[field]
        with pytest.raises(ValidationError):
            AnalysisConfig(**raw)

    @pytest.mark.parametrize("provider", ["openai", "gemini", "anthropic"])
    def test_supported_providers(self, provider):
        assert AnalysisConfig(**_raw(provider=provider)).provider == provider

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisConfig(**_raw(provider="cohere"))

    @pytest.mark.parametrize("timeout", [0, 61, -5])
    def test_timeout_out_of_range(self, timeout):
        with pytest.raises(ValidationError):
            AnalysisConfig(**_raw(timeout_seconds=timeout))

    @pytest.mark.parametrize("timeout", [1, 60])
    def test_timeout_bounds_inclusive(self, timeout):
        assert AnalysisConfig(**_raw(timeout_seconds=timeout)).timeout_seconds == timeout

    def test_empty_model_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisConfig(**_raw(analysis_model=""))

    def test_frozen(self):
        cfg = AnalysisConfig(**_raw())
        with pytest.raises(ValidationError):
            cfg.timeout_seconds = 30


# ── validate_config ─────────────────────────────────────────────────


class TestValidateConfig:
    def test_valid_mapping(self):
        report = validate_config(_raw(provider="gemini", analysis_model="gemini-2.0-flash"))
        assert report.valid
        assert report.errors == []

    def test_empty_mapping_names_every_required_field(self):
        report = validate_config({})
        assert not report.valid
        reported = {error.split(":", 1)[0] for error in report.errors}
        assert reported == set(REQUIRED_FIELDS)

    def test_partial_config_is_invalid(self):
        report = validate_config({"timeout_seconds": 30})
        assert not report.valid
        assert any(error.startswith("provider:") for error in report.errors)

    def test_non_mapping(self):
        report = validate_config(["provider", "openai"])
        assert not report.valid
        assert report.errors == ["configuration must be a mapping"]

    def test_reports_field_location(self):
        report = validate_config(_raw(timeout_seconds=120))
        assert not report.valid
        assert report.errors[0].startswith("timeout_seconds:")


# ── read_config / load_config ───────────────────────────────────────


class TestReadConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            read_config(tmp_path / "nope.yaml")
        assert exc_info.value.kind is ConfigErrorKind.NOT_FOUND

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        path.write_text("provider: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            read_config(path)
        assert exc_info.value.kind is ConfigErrorKind.INVALID

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        path.write_text("provider: openai\ntimeout_seconds: 0\n")
        with pytest.raises(ConfigError) as exc_info:
            read_config(path)
        assert exc_info.value.kind is ConfigErrorKind.INVALID
        assert "timeout_seconds" in str(exc_info.value)

    def test_empty_file_is_invalid(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        path.write_text("")
        with pytest.raises(ConfigError) as exc_info:
            read_config(path)
        assert exc_info.value.kind is ConfigErrorKind.INVALID

    def test_loads_valid_file(self, config_file):
        cfg = read_config(config_file)
        assert cfg.provider == "openai"
        assert cfg.api_key_env == "CADR_TEST_API_KEY"

    @patch.dict(os.environ, {"CADR_MODEL": "gpt-4o-mini"})
    def test_expands_env_vars(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        path.write_text(
            "provider: openai\n"
            "analysis_model: ${CADR_MODEL}\n"
            "api_key_env: OPENAI_API_KEY\n"
            "timeout_seconds: 15\n"
        )
        assert read_config(path).analysis_model == "gpt-4o-mini"


class TestLoadConfig:
    def test_missing_returns_none(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") is None

    def test_invalid_returns_none(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        path.write_text("provider: bogus\n")
        assert load_config(path) is None

    def test_missing_key_still_loads(self, config_file, no_api_key, caplog):
        with caplog.at_level("WARNING", logger="cadr.config.loader"):
            cfg = load_config(config_file)
        assert cfg is not None
        assert "CADR_TEST_API_KEY" in caplog.text


# ── write_config ────────────────────────────────────────────────────


class TestWriteConfig:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        cfg = AnalysisConfig(
            provider="anthropic",
            analysis_model="claude-haiku-4-5-20251001",
            api_key_env="ANTHROPIC_API_KEY",
            timeout_seconds=30,
            ignore_patterns=["*.md"],
        )
        write_config(cfg, path)
        assert read_config(path) == cfg

    def test_omits_unset_ignore_patterns(self, tmp_path):
        path = tmp_path / "cadr.yaml"
        write_config(AnalysisConfig(**_raw()), path)
        data = yaml.safe_load(path.read_text())
        assert "ignore_patterns" not in data
        assert list(data)[0] == "provider"


# ── _expand_env_vars ────────────────────────────────────────────────


class TestExpandEnvVars:
    @patch.dict(os.environ, {"A": "1"}, clear=True)
    def test_nested(self):
        assert _expand_env_vars({"x": ["${A}", {"y": "${A}-${B}"}], "n": 3}) == {
            "x": ["1", {"y": "1-"}],
            "n": 3,
        }
