"""FastAPI webhook server.

Receives GitHub push deliveries, verifies and filters them, and hands
accepted pushes to the deployment pipeline. The response is sent before
the deployment script starts.
"""

from typing import TYPE_CHECKING, Optional

import structlog
from fastapi import FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..config.settings import Settings
from ..exceptions import (
    InvalidPayloadError,
    SignatureMismatchError,
    SignatureMissingError,
    WebhookError,
)
from ..utils.constants import APP_NAME, GITHUB_EVENT_HEADER, GITHUB_SIGNATURE_HEADER
from .auth import verify_github_signature
from .filters import is_deployable, is_push_event, parse_push_event
from .middleware import AccessLogMiddleware

if TYPE_CHECKING:
    from ..deploy.pipeline import DeploymentPipeline

logger = structlog.get_logger()


def create_api_app(
    settings: Settings,
    pipeline: "DeploymentPipeline",
    access_log: bool = True,
) -> FastAPI:
    """Create the FastAPI application."""

    app = FastAPI(
        title=f"{APP_NAME} - Webhook API",
        version=__version__,
        docs_url="/docs" if settings.development_mode else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.development_mode else None,
    )
    if access_log:
        app.add_middleware(AccessLogMiddleware)

    @app.get("/health", response_class=PlainTextResponse)
    async def health_check() -> str:
        return "up"

    @app.post("/", status_code=204)
    async def receive_webhook(
        request: Request,
        x_github_event: Optional[str] = Header(None, alias=GITHUB_EVENT_HEADER),
        x_hub_signature: Optional[str] = Header(None, alias=GITHUB_SIGNATURE_HEADER),
        x_github_delivery: Optional[str] = Header(None),
    ) -> Response:
        """Receive a GitHub delivery and trigger a deployment for pushes."""
        if not is_push_event(x_github_event):
            return Response(status_code=204)

        body = await request.body()

        try:
            _verify(body, x_hub_signature, settings.webhook_secret_str)
            event = parse_push_event(body)
        except WebhookError as e:
            logger.warning(
                "Rejected webhook",
                reason=e.message,
                status_code=e.status_code,
                delivery_id=x_github_delivery,
            )
            raise HTTPException(status_code=e.status_code, detail=e.message)

        if not is_deployable(event, settings.deploy_ref):
            return Response(status_code=204)

        logger.info(
            "Executing script",
            script_path=settings.script_path,
            ref=event.ref,
            delivery_id=x_github_delivery,
        )
        pipeline.trigger(event)

        return Response(status_code=204)

    return app


def _verify(body: bytes, signature_header: Optional[str], secret: str) -> None:
    """Raise the matching client error unless the body is validly signed."""
    if not body:
        raise InvalidPayloadError("bad request: empty body")

    if not signature_header:
        raise SignatureMissingError("forbidden, no signature")

    if not verify_github_signature(body, signature_header, secret):
        raise SignatureMismatchError("forbidden, invalid signature")


async def run_api_server(settings: Settings, app: object) -> None:
    """Serve an ASGI application using uvicorn."""
    import uvicorn

    config = uvicorn.Config(
        app=app,
        host=settings.listen_host,
        port=settings.port,
        log_level="info" if not settings.debug else "debug",
        access_log=False,
    )
    server = uvicorn.Server(config)
    logger.info("Serving", host=settings.listen_host, port=settings.port)
    await server.serve()
