"""Deployment script execution and CDN invalidation."""

from .invalidator import (
    CacheInvalidator,
    InvalidationOutcome,
    InvalidationTarget,
    aws_credentials_available,
    targets_from_settings,
)
from .pipeline import DeploymentPipeline
from .runner import DeploymentResult, DeploymentRunner

__all__ = [
    "CacheInvalidator",
    "DeploymentPipeline",
    "DeploymentResult",
    "DeploymentRunner",
    "InvalidationOutcome",
    "InvalidationTarget",
    "aws_credentials_available",
    "targets_from_settings",
]
