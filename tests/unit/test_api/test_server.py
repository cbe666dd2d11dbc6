"""Tests for the webhook API server."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.filters import PushEvent
from src.api.server import create_api_app
from src.config import create_test_config

MASTER_PUSH = json.dumps(
    {"ref": "refs/heads/master", "after": "abc123"}
).encode()


@pytest.fixture
def pipeline():
    """Pipeline stand-in recording triggered deployments."""
    return MagicMock()


@pytest.fixture
def client(test_settings, pipeline):
    return TestClient(create_api_app(test_settings, pipeline))


def _headers(signature=None, event="push"):
    headers = {"Content-Type": "application/json"}
    if event is not None:
        headers["X-GitHub-Event"] = event
    if signature is not None:
        headers["X-Hub-Signature"] = signature
    return headers


class TestWebhookAPI:
    """Tests for the FastAPI webhook endpoint."""

    def test_health_check(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.text == "up"

    def test_master_push_triggers_deployment(
        self, client, pipeline, sign, webhook_secret
    ) -> None:
        """Valid push to master is accepted and exactly one deployment starts."""
        response = client.post(
            "/",
            content=MASTER_PUSH,
            headers=_headers(sign(MASTER_PUSH, webhook_secret)),
        )

        assert response.status_code == 204
        assert response.content == b""
        pipeline.trigger.assert_called_once_with(
            PushEvent(ref="refs/heads/master", after="abc123")
        )

    def test_header_names_are_case_insensitive(
        self, client, pipeline, sign, webhook_secret
    ) -> None:
        response = client.post(
            "/",
            content=MASTER_PUSH,
            headers={
                "x-github-event": "push",
                "x-hub-signature": sign(MASTER_PUSH, webhook_secret),
            },
        )

        assert response.status_code == 204
        pipeline.trigger.assert_called_once()

    def test_other_branch_ignored(self, client, pipeline, sign, webhook_secret) -> None:
        payload = b'{"ref": "refs/heads/feature-x"}'

        response = client.post(
            "/", content=payload, headers=_headers(sign(payload, webhook_secret))
        )

        assert response.status_code == 204
        pipeline.trigger.assert_not_called()

    @pytest.mark.parametrize("event", ["ping", "pull_request", None])
    def test_non_push_event_ignored(self, client, pipeline, event) -> None:
        """Non-push deliveries get 204 regardless of body or signature."""
        response = client.post(
            "/", content=b"not even json", headers=_headers(None, event=event)
        )

        assert response.status_code == 204
        pipeline.trigger.assert_not_called()

    def test_missing_signature(self, client, pipeline) -> None:
        response = client.post("/", content=MASTER_PUSH, headers=_headers())

        assert response.status_code == 403
        assert response.json()["detail"] == "forbidden, no signature"
        pipeline.trigger.assert_not_called()

    def test_invalid_signature(self, client, pipeline, sign) -> None:
        response = client.post(
            "/",
            content=MASTER_PUSH,
            headers=_headers(sign(MASTER_PUSH, "wrong-secret")),
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "forbidden, invalid signature"
        pipeline.trigger.assert_not_called()

    def test_tampered_body_rejected(
        self, client, pipeline, sign, webhook_secret
    ) -> None:
        signature = sign(MASTER_PUSH, webhook_secret)
        tampered = MASTER_PUSH.replace(b"abc123", b"abc124")

        response = client.post("/", content=tampered, headers=_headers(signature))

        assert response.status_code == 403
        pipeline.trigger.assert_not_called()

    def test_signature_not_echoed(self, client, sign, webhook_secret) -> None:
        """The expected digest never leaks into the error response."""
        response = client.post(
            "/", content=MASTER_PUSH, headers=_headers("sha1=deadbeef")
        )

        assert sign(MASTER_PUSH, webhook_secret) not in response.text

    def test_empty_body(self, client, pipeline, sign, webhook_secret) -> None:
        response = client.post(
            "/", content=b"", headers=_headers(sign(b"", webhook_secret))
        )

        assert response.status_code == 400
        pipeline.trigger.assert_not_called()

    def test_invalid_json_with_valid_signature(
        self, client, pipeline, sign, webhook_secret
    ) -> None:
        payload = b"{not json"

        response = client.post(
            "/", content=payload, headers=_headers(sign(payload, webhook_secret))
        )

        assert response.status_code == 400
        pipeline.trigger.assert_not_called()

    def test_missing_ref(self, client, pipeline, sign, webhook_secret) -> None:
        payload = b'{"zen": "Keep it logically awesome."}'

        response = client.post(
            "/", content=payload, headers=_headers(sign(payload, webhook_secret))
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "bad request: no ref"
        pipeline.trigger.assert_not_called()

    def test_configured_deploy_ref(self, pipeline, sign) -> None:
        settings = create_test_config(
            webhook_secret="s3cret", deploy_ref="refs/heads/main"
        )
        client = TestClient(create_api_app(settings, pipeline))
        master = b'{"ref": "refs/heads/master"}'
        main = b'{"ref": "refs/heads/main"}'

        client.post("/", content=master, headers=_headers(sign(master, "s3cret")))
        client.post("/", content=main, headers=_headers(sign(main, "s3cret")))

        pipeline.trigger.assert_called_once_with(PushEvent(ref="refs/heads/main"))

    def test_each_accepted_delivery_triggers_once(
        self, client, pipeline, sign, webhook_secret
    ) -> None:
        headers = _headers(sign(MASTER_PUSH, webhook_secret))

        client.post("/", content=MASTER_PUSH, headers=headers)
        client.post("/", content=MASTER_PUSH, headers=headers)

        assert pipeline.trigger.call_count == 2

    def test_docs_hidden_outside_development(self, pipeline) -> None:
        settings = create_test_config(development_mode=False, debug=False)
        client = TestClient(create_api_app(settings, pipeline))

        assert client.get("/docs").status_code == 404
