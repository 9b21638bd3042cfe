"""
Configuration Management for YouTube Comment Analytics
Layered settings with environment variable overrides and optional YAML file
"""

import os
import yaml
import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, List, Type, TypeVar
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseSettings)


# ============================================================================
# Core Configuration Classes
# ============================================================================


class APIConfig(BaseSettings):
    """API Server Configuration"""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8000, description="API port")
    prefix: str = Field(default="/api/v1", description="API prefix")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="CORS allowed origins (comma-separated)",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


class LoggingConfig(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (console only when unset)"
    )


class YouTubeAPISettings(BaseSettings):
    """YouTube Data API settings"""

    model_config = SettingsConfigDict(env_prefix="YOUTUBE_")

    api_key: str = Field(default="", description="YouTube Data API v3 key")
    daily_quota_limit: int = Field(
        default=10000, description="YouTube API daily quota limit"
    )
    max_retries: int = Field(
        default=3, description="Maximum retry attempts for failed requests"
    )
    request_timeout: int = Field(default=30, description="Request timeout in seconds")

    # Comment Fetching
    max_comment_pages: int = Field(
        default=20, description="Max pages of 100 comments for full retrieval"
    )
    comment_text_format: str = Field(
        default="plainText", description="commentThreads textFormat (plainText/html)"
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate API key format"""
        if v and len(v) < 20:
            raise ValueError("YouTube API key appears to be invalid (too short)")
        return v

    @field_validator("daily_quota_limit")
    @classmethod
    def validate_quota(cls, v: int) -> int:
        """Validate quota limit"""
        if v < 100:
            raise ValueError("Daily quota limit must be at least 100")
        return v


class LLMSettings(BaseSettings):
    """LLM provider settings (Groq OpenAI-compatible endpoint)"""

    model_config = SettingsConfigDict(env_prefix="GROQ_")

    api_key: str = Field(default="", description="Groq API key")
    base_url: str = Field(
        default="https://api.groq.com/openai/v1", description="Chat completions base URL"
    )
    model: str = Field(
        default="llama-3.3-70b-versatile", description="Sentiment classification model"
    )
    reply_model: str = Field(
        default="llama-3.3-70b-versatile", description="Reply generation model"
    )
    temperature: float = Field(default=0.1, description="Classification temperature")
    max_tokens: int = Field(default=4000, description="Max completion tokens")
    request_timeout: int = Field(default=60, description="Request timeout in seconds")
    max_concurrent_requests: int = Field(
        default=3, description="Concurrent classification calls per request"
    )

    @field_validator("max_concurrent_requests")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_requests must be at least 1")
        return v


class PipelineSettings(BaseSettings):
    """Comment pipeline selection and batching policies"""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    distribution_sample_size: int = Field(
        default=100, description="Top-N relevance comments for the distribution view"
    )
    display_window: int = Field(
        default=25, description="Latest-N comments for the display feed"
    )
    default_page_size: int = Field(default=25, description="Default display page size")
    classifier_batch_size: int = Field(
        default=100, description="Comments per classifier call (max 100)"
    )
    use_stub_classifier: bool = Field(
        default=False, description="Use the deterministic offline classifier"
    )

    @field_validator("classifier_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("classifier_batch_size must be between 1 and 100")
        return v


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Main Application Configuration
    Aggregates all configuration modules with unified access

    Each settings section reads its environment variables first; keys from the
    matching YAML section fill in whatever the environment leaves unset.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize application configuration

        Args:
            config_path: Optional YAML config file path
        """
        self.config_path = config_path or "configs/app.yaml"
        self.yaml_config = self._load_yaml_config()

        self.api = self._load_section(APIConfig, "api")
        self.logging = self._load_section(LoggingConfig, "logging")
        self.youtube_api = self._load_section(YouTubeAPISettings, "youtube_api")
        self.llm = self._load_section(LLMSettings, "llm")
        self.pipeline = self._load_section(PipelineSettings, "pipeline")

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.debug(f"Config file not found: {config_file}, using defaults")
            return {}

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Config file {config_file} must contain a mapping")
            return {}
        return data

    def _load_section(self, settings_cls: Type[S], section: str) -> S:
        """Build one settings section, YAML values under environment values"""
        from_env = settings_cls()
        yaml_values = self.yaml_config.get(section) or {}
        if not isinstance(yaml_values, dict):
            logger.warning(f"Ignoring YAML section '{section}': expected a mapping")
            return from_env

        overrides = {
            key: value
            for key, value in yaml_values.items()
            if key in settings_cls.model_fields and key not in from_env.model_fields_set
        }
        unknown = set(yaml_values) - set(settings_cls.model_fields)
        if unknown:
            logger.warning(f"Unknown keys in YAML section '{section}': {sorted(map(str, unknown))}")

        return settings_cls(**overrides) if overrides else from_env

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary"""
        return {
            "app": self.yaml_config.get("app", {}),
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "prefix": self.api.prefix,
                "debug": self.api.debug,
            },
            "youtube_api": {
                "api_key_set": bool(self.youtube_api.api_key),
                "quota_limit": self.youtube_api.daily_quota_limit,
                "max_comment_pages": self.youtube_api.max_comment_pages,
            },
            "llm": {
                "api_key_set": bool(self.llm.api_key),
                "model": self.llm.model,
                "max_concurrent_requests": self.llm.max_concurrent_requests,
            },
            "pipeline": {
                "distribution_sample_size": self.pipeline.distribution_sample_size,
                "display_window": self.pipeline.display_window,
                "classifier_batch_size": self.pipeline.classifier_batch_size,
                "stub_classifier": self.pipeline.use_stub_classifier,
            },
        }


# ============================================================================
# Global Configuration Instance (Singleton)
# ============================================================================

_config: Optional[Config] = None
_config_lock = threading.Lock()


@lru_cache()
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get or create global configuration instance (Thread-safe singleton)

    Args:
        config_path: Optional path to config file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config(config_path)
                logger.info("✅ Configuration initialized")

    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = None


# ============================================================================
# Configuration Validation
# ============================================================================


def validate_config(config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Validate configuration

    Args:
        config: Config instance (uses global if None)

    Returns:
        Validation result with errors and warnings
    """
    if config is None:
        config = get_config()

    errors = []
    warnings = []

    if not config.youtube_api.api_key:
        errors.append("YouTube API key not set (YOUTUBE_API_KEY)")

    if not config.llm.api_key and not config.pipeline.use_stub_classifier:
        warnings.append(
            "Groq API key not set - the offline stub classifier will label every comment neutral"
        )

    if config.pipeline.display_window > 100:
        errors.append("display_window cannot exceed 100 (one commentThreads page)")

    if config.pipeline.default_page_size < 1:
        errors.append("default_page_size must be positive")

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        if not log_path.parent.exists():
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Cannot create log directory: {e}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


# ============================================================================
# Convenience Functions
# ============================================================================


def setup_logging(config: Optional[Config] = None) -> None:
    """
    Setup logging based on configuration

    Args:
        config: Config instance (uses global if None)
    """
    import logging.handlers

    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Repeated calls (one per app lifespan) must not stack handlers
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(config.logging.format))
        root_logger.addHandler(console_handler)

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = os.path.abspath(log_path)

        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_file
            for h in root_logger.handlers
        ):
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(config.logging.format))
            root_logger.addHandler(file_handler)

    logger.info(f"📝 Logging configured: level={config.logging.level}")
