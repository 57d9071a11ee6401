"""Submission collaborators.

A fill session hands validated answers to a ``Submitter``. Two
implementations are provided: ``StorageSubmitter`` writes through a
``FormService`` and ``WebhookSubmitter`` posts the answers as JSON to an
HTTP endpoint.
"""

import asyncio
import logging
from typing import Any, Mapping, Protocol

import httpx

from ..config import get_submit_timeout, get_submit_url
from ..core.errors import SubmissionFailedError
from ..storage import EventType, FormService

logger = logging.getLogger(__name__)


class Submitter(Protocol):
    """Receives a completed answer map."""

    async def submit_form_response(
        self,
        form_id: str,
        answers: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        """Deliver one submission.

        Raises:
            SubmissionFailedError: If the submission could not be delivered.
        """
        ...


class EventTracker(Protocol):
    """Receives analytics events from fill sessions."""

    def track_event(
        self,
        form_id: str,
        event_type: EventType | str,
        event_data: Mapping[str, Any] | None = None,
    ) -> Any:
        ...


class StorageSubmitter:
    """Submitter that records responses through a FormService."""

    def __init__(self, service: FormService):
        self._service = service

    async def submit_form_response(
        self,
        form_id: str,
        answers: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        await asyncio.to_thread(
            self._service.record_submission, form_id, answers, metadata
        )


class WebhookSubmitter:
    """Submitter that POSTs responses to an HTTP endpoint.

    The request body is ``{"form_id": ..., "data": ..., "metadata": ...}``.
    Any non-2xx status is treated as a failure.

    Args:
        url: Endpoint URL. Defaults to FORMSMITH_SUBMIT_URL.
        timeout: Request timeout in seconds. Defaults to
            FORMSMITH_SUBMIT_TIMEOUT.
        headers: Extra request headers.
        transport: Optional httpx transport, used to stub the network.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        resolved = url or get_submit_url()
        if not resolved:
            raise ValueError(
                "Webhook URL required. Pass url= or set FORMSMITH_SUBMIT_URL."
            )
        self.url = resolved
        self.timeout = get_submit_timeout(timeout)
        self.headers = dict(headers or {})
        self._transport = transport

    async def submit_form_response(
        self,
        form_id: str,
        answers: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        payload = {"form_id": form_id, "data": dict(answers), "metadata": dict(metadata)}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=payload, headers=self.headers)
        except httpx.TimeoutException as e:
            raise SubmissionFailedError(f"Webhook request timed out: {e}") from e
        except httpx.RequestError as e:
            raise SubmissionFailedError(f"Webhook request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Webhook rejected submission for form {form_id}: "
                f"{response.status_code}"
            )
            raise SubmissionFailedError(
                f"Webhook returned {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

        logger.debug(f"Delivered submission for form {form_id} to {self.url}")


__all__ = [
    "Submitter",
    "EventTracker",
    "StorageSubmitter",
    "WebhookSubmitter",
]
