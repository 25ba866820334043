"""
Configuration settings for schema generation and conversion outputs.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). Model endpoints, model
names and credentials used by the schema generator live in an explicit
`GeneratorSettings` object that is handed to `OllamaClient` at construction,
so the generator can be pointed at a fake endpoint in tests without touching
process-wide state.

**Environment variables**:
  - CSV_MIGRATION_AI_MODE: "local" or "cloud" (default "cloud").
  - CSV_MIGRATION_LOCAL_MODEL / CSV_MIGRATION_CLOUD_MODEL: model names.
  - CSV_MIGRATION_LOCAL_ENDPOINT / CSV_MIGRATION_CLOUD_ENDPOINT: API URLs.
  - OLLAMA_API_KEY: required for cloud mode.
    Get a key at https://ollama.com/settings/keys
  - CSV_MIGRATION_TIMEOUT_SECONDS: HTTP timeout (default 120).
  - CSV_MIGRATION_OUTPUT_DIR: where actions write results (default "output").

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (no-op if the file is absent)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


AI_MODE_LOCAL = "local"
AI_MODE_CLOUD = "cloud"
SUPPORTED_AI_MODES = (AI_MODE_LOCAL, AI_MODE_CLOUD)

DEFAULT_LOCAL_MODEL = "qwen2.5-coder:0.5b"
DEFAULT_CLOUD_MODEL = "gpt-oss:120b"
DEFAULT_LOCAL_ENDPOINT = "http://localhost:11434/api/generate"
DEFAULT_CLOUD_ENDPOINT = "https://ollama.com/api/chat"
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_OUTPUT_DIR = "output"


def normalize_ai_mode(mode: str) -> str:
    """
    Normalize a user-supplied mode ("LOCAL", " cloud ") to its canonical form.

    Raises:
        ValueError: If the mode is not one of SUPPORTED_AI_MODES.
    """
    normalized = (mode or "").strip().lower()
    if normalized not in SUPPORTED_AI_MODES:
        raise ValueError(
            f"AI mode must be one of {list(SUPPORTED_AI_MODES)}, got: {mode!r}"
        )
    return normalized


@dataclass(frozen=True)
class GeneratorSettings:
    """
    Configuration for the Ollama endpoints used by schema generation.

    **Modes**:
      - local: an Ollama server on this machine (`/api/generate`, no auth).
      - cloud: Ollama cloud (`/api/chat`, Bearer token from OLLAMA_API_KEY).

    Attributes:
        mode: "local" or "cloud".
        local_model: Model name for local mode.
        cloud_model: Model name for cloud mode.
        local_endpoint: Generate endpoint of the local server.
        cloud_endpoint: Chat endpoint of Ollama cloud.
        api_key: Ollama cloud API key. REQUIRED in cloud mode.
        timeout_seconds: HTTP request timeout in seconds. Model calls on large
                        samples are slow, hence the generous default.
    """
    mode: str = AI_MODE_CLOUD
    local_model: str = DEFAULT_LOCAL_MODEL
    cloud_model: str = DEFAULT_CLOUD_MODEL
    local_endpoint: str = DEFAULT_LOCAL_ENDPOINT
    cloud_endpoint: str = DEFAULT_CLOUD_ENDPOINT
    api_key: str = ""
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.mode not in SUPPORTED_AI_MODES:
            raise ValueError(
                f"CSV_MIGRATION_AI_MODE must be one of {list(SUPPORTED_AI_MODES)}, "
                f"got: {self.mode!r}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"CSV_MIGRATION_TIMEOUT_SECONDS must be positive, got: {self.timeout_seconds}"
            )
        if self.mode == AI_MODE_CLOUD and not self.api_key:
            raise ValueError(
                "OLLAMA_API_KEY is required for cloud mode but not set. "
                "Please set it in your .env file or environment variables. "
                "Get an API key at https://ollama.com/settings/keys"
            )

    @property
    def model(self) -> str:
        """Model name for the active mode."""
        return self.local_model if self.mode == AI_MODE_LOCAL else self.cloud_model

    @property
    def endpoint(self) -> str:
        """Endpoint URL for the active mode."""
        return self.local_endpoint if self.mode == AI_MODE_LOCAL else self.cloud_endpoint

    def with_mode(self, mode: str) -> "GeneratorSettings":
        """
        Return a copy switched to another mode (e.g. a CLI override).

        Raises:
            ValueError: If the mode is unknown, or cloud is requested without
                       an API key.
        """
        return replace(self, mode=normalize_ai_mode(mode))

    @classmethod
    def from_env(cls, mode: Optional[str] = None) -> "GeneratorSettings":
        """
        Load generator settings from environment variables.

        Args:
            mode: Optional mode override; takes precedence over
                 CSV_MIGRATION_AI_MODE.

        Returns:
            GeneratorSettings with values loaded from environment.

        Raises:
            ValueError: If a value is invalid, or cloud mode lacks OLLAMA_API_KEY.

        Usage example:
            >>> # In .env file:
            >>> # OLLAMA_API_KEY=your_key_here
            >>>
            >>> settings = GeneratorSettings.from_env()
            >>> settings.model
            'gpt-oss:120b'
        """
        mode_str = mode if mode is not None else os.getenv("CSV_MIGRATION_AI_MODE", AI_MODE_CLOUD)
        timeout_str = os.getenv("CSV_MIGRATION_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))

        try:
            timeout_seconds = int(timeout_str)
        except ValueError:
            raise ValueError(
                f"CSV_MIGRATION_TIMEOUT_SECONDS must be an integer, got: {timeout_str}"
            )

        return cls(
            mode=normalize_ai_mode(mode_str),
            local_model=os.getenv("CSV_MIGRATION_LOCAL_MODEL", DEFAULT_LOCAL_MODEL),
            cloud_model=os.getenv("CSV_MIGRATION_CLOUD_MODEL", DEFAULT_CLOUD_MODEL),
            local_endpoint=os.getenv("CSV_MIGRATION_LOCAL_ENDPOINT", DEFAULT_LOCAL_ENDPOINT),
            cloud_endpoint=os.getenv("CSV_MIGRATION_CLOUD_ENDPOINT", DEFAULT_CLOUD_ENDPOINT),
            api_key=os.getenv("OLLAMA_API_KEY", ""),
            timeout_seconds=timeout_seconds,
        )


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings for the migration tools.

    Attributes:
        generator: Schema generator settings. None if not configured (for
                  example cloud mode without an API key); conversion does not
                  need them.
        output_dir: Base directory for generated schemas and converted CSVs.
    """
    generator: Optional[GeneratorSettings] = None
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)

    @classmethod
    def from_env(cls, require_generator: bool = False) -> "Settings":
        """
        Load global settings from environment variables.

        Args:
            require_generator: If True, raise if generator settings can't be
                              loaded. If False (default), they are optional.

        Raises:
            ValueError: If require_generator=True and generator settings are
                       invalid or incomplete.
        """
        generator_settings = None
        try:
            generator_settings = GeneratorSettings.from_env()
        except ValueError as e:
            if require_generator:
                raise ValueError(
                    f"Generator settings are required but could not be loaded: {e}"
                ) from e

        output_dir = Path(os.getenv("CSV_MIGRATION_OUTPUT_DIR", DEFAULT_OUTPUT_DIR))

        return cls(generator=generator_settings, output_dir=output_dir)


_default_settings: Optional[Settings] = None


def get_settings(require_generator: bool = False) -> Settings:
    """
    Get the global settings singleton (loaded from environment on first call).

    Tests can bypass this by constructing Settings / GeneratorSettings directly.

    Args:
        require_generator: If True, raise if generator settings are missing.

    Raises:
        ValueError: If require_generator=True and the generator is not configured.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env(require_generator=require_generator)

    if require_generator and _default_settings.generator is None:
        raise ValueError(
            "Generator settings are required but not configured. "
            "Set OLLAMA_API_KEY in your .env file, or use local mode "
            "(CSV_MIGRATION_AI_MODE=local)."
        )

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    Clears the cached settings so the next `get_settings()` call reloads
    them from the environment.
    """
    global _default_settings
    _default_settings = None
