"""CloudFront cache invalidation after a deployment.

Each configured distribution gets one invalidation of ``/*``. Targets are
independent: a failure on one is logged and the next is still attempted.
Nothing is retried.
"""

import asyncio
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ..config.settings import Settings
from ..exceptions import InvalidationError
from ..utils.constants import AWS_CREDENTIAL_VARS, INVALIDATION_PATHS

logger = structlog.get_logger()

CredentialCheck = Callable[[], bool]
ClientFactory = Callable[[], Any]


@dataclass(frozen=True)
class InvalidationTarget:
    """A CloudFront distribution to purge after deploys."""

    name: str
    distribution_id: str


@dataclass
class InvalidationOutcome:
    """Result of one invalidation request."""

    target: InvalidationTarget
    caller_reference: str
    invalidation_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def targets_from_settings(settings: Settings) -> List[InvalidationTarget]:
    """Build the book/docs targets, skipping unset distributions."""
    candidates = [
        ("book", settings.book_cdn_dist_id),
        ("docs", settings.docs_cdn_dist_id),
    ]
    return [
        InvalidationTarget(name=name, distribution_id=dist_id)
        for name, dist_id in candidates
        if dist_id
    ]


def aws_credentials_available(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check both static AWS credential variables are present."""
    env = os.environ if environ is None else environ
    return all(var in env for var in AWS_CREDENTIAL_VARS)


def make_caller_reference(clock: Callable[[], float] = time.time) -> str:
    """Caller reference from the current Unix time in whole seconds.

    Two invalidations of the same distribution within one second share a
    reference and CloudFront treats the second as a duplicate.
    """
    return str(int(clock()))


def _cloudfront_client() -> Any:
    return boto3.client("cloudfront")


class CacheInvalidator:
    """Issues CloudFront invalidations for the configured targets."""

    def __init__(
        self,
        targets: List[InvalidationTarget],
        credentials_available: CredentialCheck = aws_credentials_available,
        client_factory: ClientFactory = _cloudfront_client,
        clock: Callable[[], float] = time.time,
    ):
        self.targets = list(targets)
        self._credentials_available = credentials_available
        self._client_factory = client_factory
        self._clock = clock

    async def invalidate_all(self) -> List[InvalidationOutcome]:
        """Invalidate every target once; failures are isolated per target."""
        if not self.targets:
            logger.debug("No CloudFront distributions configured")
            return []

        if not self._credentials_available():
            logger.info(
                "AWS credentials not present, skipping CloudFront invalidation",
                targets=[target.name for target in self.targets],
            )
            return []

        logger.info("Creating CloudFront invalidation")
        try:
            client = await asyncio.to_thread(self._client_factory)
        except Exception as e:
            logger.error("Could not create CloudFront client", error=str(e))
            return [
                InvalidationOutcome(
                    target=target,
                    caller_reference=make_caller_reference(self._clock),
                    error=str(e),
                )
                for target in self.targets
            ]

        outcomes = []
        for target in self.targets:
            caller_reference = make_caller_reference(self._clock)
            outcome = InvalidationOutcome(
                target=target, caller_reference=caller_reference
            )
            try:
                outcome.invalidation_id = await asyncio.to_thread(
                    self._invalidate, client, target, caller_reference
                )
                logger.info(
                    "CloudFront invalidation created",
                    target=target.name,
                    distribution_id=target.distribution_id,
                    invalidation_id=outcome.invalidation_id,
                    caller_reference=caller_reference,
                )
            except Exception as e:
                outcome.error = str(e)
                logger.error(
                    "Error invalidating CloudFront distribution",
                    target=target.name,
                    distribution_id=target.distribution_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            outcomes.append(outcome)
        return outcomes

    def _invalidate(
        self, client: Any, target: InvalidationTarget, caller_reference: str
    ) -> Optional[str]:
        """Send one create-invalidation request and return its ID."""
        try:
            response = client.create_invalidation(
                DistributionId=target.distribution_id,
                InvalidationBatch={
                    "Paths": {
                        "Quantity": len(INVALIDATION_PATHS),
                        "Items": list(INVALIDATION_PATHS),
                    },
                    "CallerReference": caller_reference,
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise InvalidationError(
                f"Invalidation of {target.name} failed: {e}",
                distribution_id=target.distribution_id,
            ) from e
        return response.get("Invalidation", {}).get("Id")
