"""Test configuration settings classes."""

import json
import logging

import pytest
from pydantic import ValidationError

from ytldr.config import (
    ExtractionSettings,
    GeminiSettings,
    HuggingFaceSettings,
    Settings,
    SummarizationSettings,
    configure_logging,
    get_settings,
)


@pytest.fixture
def restore_logging():
    """Put root logger handlers back after configure_logging replaces them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGeminiSettings:
    """Test GeminiSettings configuration."""

    def test_default_values(self, clean_env):
        gemini = GeminiSettings()
        assert gemini.api_key.get_secret_value() == ""
        assert gemini.model == "gemini-1.5-flash-latest"
        assert gemini.api_base == "https://generativelanguage.googleapis.com/v1beta"
        assert gemini.temperature == 0.3
        assert gemini.is_configured() is False

    def test_flat_env_vars(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "secret")
        clean_env.setenv("GEMINI_MODEL", "gemini-pro")
        clean_env.setenv("GEMINI_TIMEOUT", "15")

        gemini = GeminiSettings()
        assert gemini.is_configured() is True
        assert gemini.model == "gemini-pro"
        assert gemini.timeout == 15.0

    def test_nested_env_vars(self, clean_env):
        clean_env.setenv("GEMINI__API_KEY", "nested-secret")
        clean_env.setenv("GEMINI__MAX_OUTPUT_TOKENS", "1024")

        gemini = GeminiSettings()
        assert gemini.api_key.get_secret_value() == "nested-secret"
        assert gemini.max_output_tokens == 1024

    def test_api_key_not_exposed_in_repr(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "super-secret")
        assert "super-secret" not in repr(GeminiSettings())

    def test_temperature_out_of_range(self, clean_env):
        clean_env.setenv("GEMINI_TEMPERATURE", "3.5")
        with pytest.raises(ValidationError):
            GeminiSettings()


class TestHuggingFaceSettings:
    """Test HuggingFaceSettings configuration."""

    def test_default_values(self, clean_env):
        hf = HuggingFaceSettings()
        assert hf.api_key is None
        assert hf.api_base is None
        assert hf.task == "text-generation"
        assert hf.max_concurrency == 0

    def test_hf_token_alias(self, clean_env):
        clean_env.setenv("HF_TOKEN", "hf_abc")
        assert HuggingFaceSettings().api_key == "hf_abc"

    def test_task_is_normalized(self, clean_env):
        clean_env.setenv("HUGGINGFACE_TASK", "  Summarization ")
        assert HuggingFaceSettings().task == "summarization"

    def test_invalid_task(self, clean_env):
        clean_env.setenv("HUGGINGFACE_TASK", "translation")
        with pytest.raises(ValidationError):
            HuggingFaceSettings()


class TestSummarizationSettings:
    """Test SummarizationSettings configuration."""

    def test_default_values(self, clean_env):
        summarization = SummarizationSettings()
        assert summarization.providers == ["gemini", "huggingface"]
        assert summarization.sticky_provider is True
        assert summarization.max_chunk_size == 30000
        assert summarization.overlap_size == 1000
        assert summarization.boundary_ratio == 0.7
        assert summarization.max_concurrency == 1
        assert summarization.forensic_temperature == 0.1

    def test_providers_csv(self, clean_env):
        clean_env.setenv("SUMMARY_PROVIDERS", "HuggingFace, gemini,")
        assert SummarizationSettings().providers == ["huggingface", "gemini"]

    def test_nested_env_vars(self, clean_env):
        clean_env.setenv("SUMMARIZATION__MAX_CHUNK_SIZE", "5000")
        clean_env.setenv("SUMMARIZATION__STICKY_PROVIDER", "false")

        summarization = SummarizationSettings()
        assert summarization.max_chunk_size == 5000
        assert summarization.sticky_provider is False

    def test_chunk_size_must_be_positive(self, clean_env):
        clean_env.setenv("SUMMARY_MAX_CHUNK_SIZE", "0")
        with pytest.raises(ValidationError):
            SummarizationSettings()


class TestExtractionSettings:
    def test_flat_env_vars(self, clean_env):
        clean_env.setenv("EXTRACTION_FETCH_TIMEOUT", "3.5")
        clean_env.setenv("EXTRACTION_USER_AGENT", "tester/1.0")

        extraction = ExtractionSettings()
        assert extraction.fetch_timeout == 3.5
        assert extraction.user_agent == "tester/1.0"


class TestSettings:
    """Test top-level Settings."""

    def test_default_values(self, clean_env):
        settings = Settings()
        assert settings.service_name == "ytldr"
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.log_format == "json"
        assert isinstance(settings.summarization, SummarizationSettings)
        assert isinstance(settings.gemini, GeminiSettings)

    def test_groups_read_environment(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "secret")
        clean_env.setenv("SUMMARY_PROVIDERS", "gemini")
        clean_env.setenv("PORT", "9000")

        settings = Settings()
        assert settings.gemini.is_configured() is True
        assert settings.summarization.providers == ["gemini"]
        assert settings.port == 9000

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("GEMINI_MODEL=gemini-from-dotenv\nLOG_LEVEL=DEBUG\n")

        settings = Settings()
        assert settings.gemini.model == "gemini-from-dotenv"
        assert settings.log_level == "DEBUG"

    def test_get_settings_is_cached(self, clean_env):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    def test_json_format_includes_extra_fields(self, clean_env, restore_logging, capsys):
        settings = Settings(service_name="ytldr-test", log_format="json", log_level="INFO")
        configure_logging(settings)

        logging.getLogger("ytldr.test").info(
            "Chunk processed", extra={"chunk_index": 2, "provider": "gemini"}
        )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "Chunk processed"
        assert record["level"] == "INFO"
        assert record["logger"] == "ytldr.test"
        assert record["service"] == "ytldr-test"
        assert record["chunk_index"] == 2
        assert record["provider"] == "gemini"

    def test_text_format(self, clean_env, restore_logging, capsys):
        configure_logging(Settings(log_format="text", log_level="WARNING"))

        logger = logging.getLogger("ytldr.test")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "ytldr.test - WARNING - shown" in out
