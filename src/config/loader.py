"""Configuration loading with environment detection."""

import os
from pathlib import Path
from typing import Any, Optional

import structlog
from dotenv import load_dotenv

from src.exceptions import (
    ConfigurationError,
    InvalidConfigError,
    MissingConfigError,
)

from .environments import DevelopmentConfig, ProductionConfig, TestingConfig
from .settings import Settings

logger = structlog.get_logger()


def load_config(
    env: Optional[str] = None, config_file: Optional[Path] = None
) -> Settings:
    """Load configuration based on environment.

    Args:
        env: Environment name (development, testing, production)
        config_file: Optional path to configuration file

    Returns:
        Configured Settings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    env_file = config_file or Path(".env")
    if env_file.exists():
        logger.info("Loading .env file", path=str(env_file))
        load_dotenv(env_file)
    else:
        logger.debug("No .env file found", path=str(env_file))

    env = env or os.getenv("ENVIRONMENT", "production")
    logger.info("Loading configuration", environment=env)

    try:
        settings = Settings()

        settings = _apply_environment_overrides(settings, env)

        _validate_config(settings)

        logger.info(
            "Configuration loaded successfully",
            environment=env,
            debug=settings.debug,
            script_path=settings.script_path,
            deploy_ref=settings.deploy_ref,
            features_enabled=_get_enabled_features_summary(settings),
        )

        return settings

    except Exception as e:
        logger.error("Failed to load configuration", error=str(e), environment=env)
        raise ConfigurationError(f"Configuration loading failed: {e}") from e


def _apply_environment_overrides(settings: Settings, env: Optional[str]) -> Settings:
    """Apply environment-specific configuration overrides."""
    overrides = {}

    if env == "development":
        overrides = DevelopmentConfig.as_dict()
    elif env == "testing":
        overrides = TestingConfig.as_dict()
    elif env == "production":
        overrides = ProductionConfig.as_dict()
    else:
        logger.warning("Unknown environment, using default settings", environment=env)

    for key, value in overrides.items():
        if hasattr(settings, key):
            setattr(settings, key, value)
            logger.debug(
                "Applied environment override", key=key, value=value, environment=env
            )

    return settings


def _validate_config(settings: Settings) -> None:
    """Perform additional runtime validation."""
    if settings.uses_default_secret:
        if settings.is_production:
            raise InvalidConfigError(
                "SECRET must be set to the webhook secret in production"
            )
        logger.warning("Using the default webhook secret")

    if not Path(settings.script_path).is_file():
        # The script is often written by the deployment itself, so only warn
        logger.warning("Deploy script not found", script_path=settings.script_path)

    if settings.enable_static_sites and not settings.not_found_page.is_file():
        raise MissingConfigError(f"404 page not found: {settings.not_found_page}")


def _get_enabled_features_summary(settings: Settings) -> list[str]:
    """Get a summary of enabled features for logging."""
    features = []
    if settings.book_cdn_dist_id:
        features.append("book_invalidation")
    if settings.docs_cdn_dist_id:
        features.append("docs_invalidation")
    if settings.enable_static_sites:
        features.append("static_sites")
    return features


def create_test_config(**overrides: Any) -> Settings:
    """Create configuration for testing with optional overrides.

    Args:
        **overrides: Configuration values to override

    Returns:
        Settings instance configured for testing
    """
    test_values = TestingConfig.as_dict()
    test_values.update({"webhook_secret": "test-secret"})
    test_values.update(overrides)

    return Settings(_env_file=None, **test_values)
