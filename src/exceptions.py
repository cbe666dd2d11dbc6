"""Custom exceptions for the deploy hook service."""

from typing import Optional


class DeployHookError(Exception):
    """Base exception for the deploy hook service."""


class ConfigurationError(DeployHookError):
    """Configuration-related errors."""


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""


class InvalidConfigError(ConfigurationError):
    """Configuration is invalid."""


class WebhookError(DeployHookError):
    """A webhook request was rejected and the caller gets a 4xx response."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class SignatureMissingError(WebhookError):
    """The request carried no signature header."""

    status_code = 403


class SignatureMismatchError(WebhookError):
    """The request signature does not match the payload."""

    status_code = 403


class InvalidPayloadError(WebhookError):
    """The request body is empty, not JSON, or lacks a ref."""

    status_code = 400


class DeploymentError(DeployHookError):
    """Deployment script execution failed."""


class ScriptStartError(DeploymentError):
    """Deployment script could not be started."""

    def __init__(self, message: str, script_path: Optional[str] = None):
        super().__init__(message)
        self.script_path = script_path


class InvalidationError(DeployHookError):
    """A CDN invalidation request failed."""

    def __init__(self, message: str, distribution_id: Optional[str] = None):
        super().__init__(message)
        self.distribution_id = distribution_id
