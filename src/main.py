"""Main entry point for the deploy hook."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import structlog

from src import __version__
from src.api.server import create_api_app, run_api_server
from src.config.features import FeatureFlags
from src.config.settings import Settings
from src.deploy import (
    CacheInvalidator,
    DeploymentPipeline,
    DeploymentRunner,
    targets_from_settings,
)
from src.exceptions import ConfigurationError
from src.sites import create_site_app, load_not_found_page
from src.utils.constants import APP_DESCRIPTION, APP_NAME


def setup_logging(debug: bool = False) -> None:
    """Configure structured logging."""
    level = logging.DEBUG if debug else logging.INFO

    # Configure standard logging
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )

    # Keep normal runs readable; allow deep third-party logs only in --debug mode.
    noisy_loggers = (
        "boto3",
        "botocore",
        "urllib3",
        "uvicorn.access",
    )
    noisy_level = logging.DEBUG if debug else logging.WARNING
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(noisy_level)

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (
                structlog.processors.JSONRenderer()
                if not debug
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=APP_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", action="version", version=f"{APP_NAME} {__version__}"
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    parser.add_argument("--config-file", type=Path, help="Path to configuration file")

    return parser.parse_args()


def create_application(config: Settings) -> Dict[str, Any]:
    """Create and wire the application components."""
    logger = structlog.get_logger()
    logger.info("Using script", script_path=config.script_path)

    features = FeatureFlags(config)

    runner = DeploymentRunner(config.script_path, shell=config.script_shell)
    invalidator = CacheInvalidator(targets_from_settings(config))
    pipeline = DeploymentPipeline(
        runner,
        invalidator,
        invalidate_on_failure=config.invalidate_on_failure,
    )

    api_app = create_api_app(
        config, pipeline, access_log=not features.static_sites_enabled
    )

    app: Any = api_app
    if features.static_sites_enabled:
        not_found_page = load_not_found_page(config.not_found_page)
        app = create_site_app(config, api_app, not_found_page)

    return {
        "app": app,
        "api_app": api_app,
        "pipeline": pipeline,
        "config": config,
        "features": features,
    }


async def main() -> None:
    """Main application entry point."""
    args = parse_args()
    setup_logging(debug=args.debug)

    logger = structlog.get_logger()
    logger.info("Starting Deploy Hook", version=__version__)

    try:
        from src.config import load_config

        config = load_config(config_file=args.config_file)
        features = FeatureFlags(config)
        if not args.debug:
            logging.getLogger().setLevel(config.log_level)

        logger.info(
            "Configuration loaded",
            environment="production" if config.is_production else "development",
            enabled_features=features.get_enabled_features(),
            debug=config.debug,
        )

        application = create_application(config)
        await run_api_server(config, application["app"])

    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error", error=str(e))
        sys.exit(1)


def run() -> None:
    """Synchronous entry point for setuptools."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)


if __name__ == "__main__":
    run()
