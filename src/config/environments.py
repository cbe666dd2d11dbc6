"""Environment-specific configuration overrides."""

from typing import Any, Dict


class EnvironmentConfig:
    """Base for per-environment overrides applied on top of ``Settings``."""

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Return the overrides declared on this class."""
        return {
            key: value
            for key, value in cls.__dict__.items()
            if not key.startswith("_")
            and not callable(value)
            and not isinstance(value, classmethod)
        }


class DevelopmentConfig(EnvironmentConfig):
    """Development environment overrides."""

    debug: bool = True
    development_mode: bool = True
    log_level: str = "DEBUG"


class TestingConfig(EnvironmentConfig):
    """Testing environment configuration."""

    debug: bool = True
    development_mode: bool = True
    enable_static_sites: bool = False  # Webhook only, no public tree needed


class ProductionConfig(EnvironmentConfig):
    """Production environment configuration."""

    debug: bool = False
    development_mode: bool = False
    log_level: str = "INFO"
