"""Tests for submission collaborators."""

import json
import threading

import httpx
import pytest

from formsmith.core.errors import FormNotFoundError, SubmissionFailedError

from .lib import StorageSubmitter, WebhookSubmitter


def _recording_transport(status_code: int = 200, body: str = "ok"):
    """MockTransport that records request payloads."""
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(
            {
                "url": str(request.url),
                "headers": dict(request.headers),
                "body": json.loads(request.content),
            }
        )
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler), seen


class TestWebhookSubmitter:
    """Tests for WebhookSubmitter with a mocked transport."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_posts_json_payload(self):
        transport, seen = _recording_transport()
        submitter = WebhookSubmitter(
            "https://hooks.example.com/forms",
            headers={"X-Token": "abc"},
            transport=transport,
        )

        await submitter.submit_form_response(
            "form-1", {"name": "Ann"}, {"submitted_at": "2024-01-01T00:00:00Z"}
        )

        assert len(seen) == 1
        assert seen[0]["url"] == "https://hooks.example.com/forms"
        assert seen[0]["headers"]["x-token"] == "abc"
        assert seen[0]["body"] == {
            "form_id": "form-1",
            "data": {"name": "Ann"},
            "metadata": {"submitted_at": "2024-01-01T00:00:00Z"},
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport, _ = _recording_transport(status_code=503, body="down")
        submitter = WebhookSubmitter("https://hooks.example.com", transport=transport)

        with pytest.raises(SubmissionFailedError) as excinfo:
            await submitter.submit_form_response("form-1", {}, {})

        assert excinfo.value.status_code == 503
        assert excinfo.value.response_body == "down"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        submitter = WebhookSubmitter(
            "https://hooks.example.com", transport=httpx.MockTransport(handler)
        )

        with pytest.raises(SubmissionFailedError, match="request failed"):
            await submitter.submit_form_response("form-1", {}, {})

    @pytest.mark.unit
    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMSMITH_SUBMIT_URL", "https://env.example.com/hook")
        monkeypatch.setenv("FORMSMITH_SUBMIT_TIMEOUT", "2.5")
        submitter = WebhookSubmitter()
        assert submitter.url == "https://env.example.com/hook"
        assert submitter.timeout == 2.5

    @pytest.mark.unit
    def test_url_required(self, monkeypatch):
        monkeypatch.delenv("FORMSMITH_SUBMIT_URL", raising=False)
        with pytest.raises(ValueError, match="FORMSMITH_SUBMIT_URL"):
            WebhookSubmitter()


class TestStorageSubmitter:
    """Tests for StorageSubmitter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_records_submission(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        submitter = StorageSubmitter(form_service)

        await submitter.submit_form_response(
            stored.id, {"name": "Ann"}, {"referrer": "https://site.example"}
        )

        [submission] = form_service.list_submissions(owner, stored.id)
        assert submission.data == {"name": "Ann"}
        assert submission.metadata == {"referrer": "https://site.example"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_writes_off_the_event_loop(self, form_service, owner, contact_form, monkeypatch):
        stored = form_service.create_form(owner, contact_form)
        writer_threads: list[int] = []
        record = form_service.record_submission

        def tracking_record(*args, **kwargs):
            writer_threads.append(threading.get_ident())
            return record(*args, **kwargs)

        monkeypatch.setattr(form_service, "record_submission", tracking_record)
        await StorageSubmitter(form_service).submit_form_response(stored.id, {"name": "Ann"}, {})

        assert writer_threads and writer_threads[0] != threading.get_ident()
        assert form_service.count_submissions(stored.id) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_form(self, form_service):
        submitter = StorageSubmitter(form_service)
        with pytest.raises(FormNotFoundError):
            await submitter.submit_form_response("missing", {}, {})
