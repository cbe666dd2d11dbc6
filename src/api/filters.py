"""Decide whether a verified GitHub delivery should trigger a deployment."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from ..exceptions import InvalidPayloadError
from ..utils.constants import PUSH_EVENT

logger = structlog.get_logger()


@dataclass(frozen=True)
class PushEvent:
    """The parts of a push payload the deploy hook cares about."""

    ref: str
    after: Optional[str] = None
    repository: Optional[str] = None


def is_push_event(event_type: Optional[str]) -> bool:
    """Only ``push`` deliveries can trigger a deployment."""
    if event_type == PUSH_EVENT:
        return True
    logger.info("Ignoring non-push event", event_type=event_type)
    return False


def parse_push_event(payload_body: bytes) -> PushEvent:
    """Decode a push payload, requiring a string ``ref``.

    Raises:
        InvalidPayloadError: body is not a JSON object or has no usable ref
    """
    try:
        payload: Any = json.loads(payload_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidPayloadError("bad request: invalid JSON") from e

    if not isinstance(payload, dict):
        raise InvalidPayloadError("bad request: payload is not an object")

    ref = payload.get("ref")
    if not isinstance(ref, str):
        raise InvalidPayloadError("bad request: no ref")

    return PushEvent(
        ref=ref,
        after=_optional_str(payload.get("after")),
        repository=_repository_name(payload),
    )


def is_deployable(event: PushEvent, deploy_ref: str) -> bool:
    """Check the push targets the deployment branch."""
    if event.ref == deploy_ref:
        return True
    logger.info("Ignoring push to ref", ref=event.ref, deploy_ref=deploy_ref)
    return False


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _repository_name(payload: Dict[str, Any]) -> Optional[str]:
    repository = payload.get("repository")
    if isinstance(repository, dict):
        return _optional_str(repository.get("full_name"))
    return None
