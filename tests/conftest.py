from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

SETTINGS_ENV_PREFIXES = (
    "GEMINI_",
    "GEMINI__",
    "HUGGINGFACE_",
    "HUGGINGFACE__",
    "SUMMARY_",
    "SUMMARIZATION__",
    "FORENSIC_",
    "EXTRACTION_",
    "EXTRACTION__",
)
SETTINGS_ENV_NAMES = ("HF_TOKEN", "LOG_LEVEL", "LOG_FORMAT", "SERVICE_NAME", "HOST", "PORT")


@pytest.fixture()
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator:
    """Isolate settings from the host environment and any .env file."""
    import os

    from ytldr.config import get_settings

    # Disable .env file loading by changing to a temp directory
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.upper().startswith(SETTINGS_ENV_PREFIXES) or name.upper() in SETTINGS_ENV_NAMES:
            monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


# ==================== Fake Fixtures ====================

@pytest.fixture
def scripted_provider():
    """
    Provide ScriptedProvider for tests.

    Answers every prompt with a numbered summary and records the prompts.

    Example:
        async def test_generate(scripted_provider):
            text = await scripted_provider.generate("prompt")
            assert text == "scripted summary 0"
            assert scripted_provider.call_count == 1
    """
    from tests.fakes.completion import ScriptedProvider
    return ScriptedProvider()


@pytest.fixture
def forensic_response() -> str:
    """A well-formed four-section forensic completion."""
    return (
        "1. **Structured Outline of How to Flash ESP32 Firmware**\n"
        "- Section 1: Preparation\n"
        "  - Step 1: Install esptool 4.5 with `pip install esptool`\n"
        "  - Step 2: Open the **Devices** tab\n"
        "\n"
        "2. **Bullet Summary (w/ Emojis):**\n"
        "- 🛠️ esptool 4.5\n"
        "- 💻 ESP32-WROOM-32\n"
        "\n"
        "3. **TL;DR (3-15 Sentences):**\n"
        "The tutorial flashes new firmware onto an ESP32 board.\n"
        "\n"
        "4. **Full Link Breakdown:**\n"
        "- https://docs.espressif.com/esptool (Docs)\n"
    )
