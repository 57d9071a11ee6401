"""Fill sessions for published forms.

A ``FillSession`` owns one respondent's view of a form: its own copy of the
schema, the answer map, the per-field errors from the last validation and
the submission state machine::

    IDLE -> SUBMITTING -> SUCCEEDED
                       -> FAILED

A new submit is accepted from every state except ``SUBMITTING``. Failed
submissions keep the answers so the respondent can retry; successful ones
reset the answer map.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Mapping

from ..core.errors import (
    FieldNotFoundError,
    InvalidSchemaError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from ..render import FormPresentation, RenderMode, render
from ..schema import FormSchema
from ..storage import EventType
from ..submit import EventTracker, Submitter
from ..validation import ValidationResult, missing_required, validate_answers

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Embed Context
# =============================================================================

_IDENTITY_PARAMS = {
    "userId": "user_id",
    "userName": "user_name",
    "userEmail": "user_email",
    "userCompany": "user_company",
}


@dataclass
class EmbedContext:
    """Identity passed to an embedded form through its URL query string.

    Attributes:
        form_id: Form id from the ``id`` parameter.
        user_id: Host application's user id.
        user_name: Host application's user name.
        user_email: Host application's user email.
        user_company: Host application's company name.
        extras: Every other query parameter, verbatim.
    """

    form_id: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_company: str | None = None
    extras: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "EmbedContext":
        """Build from parsed query parameters.

        Multi-valued parameters (lists) keep their first value.
        """
        values: dict[str, Any] = {}
        extras: dict[str, str] = {}
        for key, raw in params.items():
            value = raw[0] if isinstance(raw, (list, tuple)) and raw else raw
            if key == "id":
                values["form_id"] = value
            elif key in _IDENTITY_PARAMS:
                values[_IDENTITY_PARAMS[key]] = value
            else:
                extras[key] = value
        return cls(extras=extras, **values)

    def to_metadata(self) -> dict[str, Any]:
        """Identity fields under their query parameter names, then extras."""
        metadata: dict[str, Any] = {}
        for param, attr in _IDENTITY_PARAMS.items():
            value = getattr(self, attr)
            if value is not None:
                metadata[param] = value
        metadata.update(self.extras)
        return metadata


def build_submission_metadata(
    embed: EmbedContext | None = None,
    user_agent: str | None = None,
    referrer: str | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Metadata stored alongside a submission."""
    metadata: dict[str, Any] = {
        "submitted_at": datetime.now(UTC).isoformat(),
        "user_agent": user_agent,
        "referrer": referrer,
    }
    if embed is not None:
        metadata.update(embed.to_metadata())
    if extra:
        metadata.update(extra)
    return metadata


# =============================================================================
# Fill Session
# =============================================================================


class FillSession:
    """One respondent filling one form.

    Args:
        form: Form to fill; the session keeps a deep copy.
        submitter: Collaborator receiving the answers.
        form_id: Stored form id passed to the submitter and tracker.
            Defaults to the embed context's form id.
        embed: Identity from the embedding page.
        tracker: Optional analytics collaborator.
    """

    def __init__(
        self,
        form: FormSchema,
        submitter: Submitter,
        form_id: str | None = None,
        embed: EmbedContext | None = None,
        tracker: EventTracker | None = None,
    ):
        self.form = form.model_copy(deep=True)
        self.embed = embed or EmbedContext()
        self.form_id = form_id or self.embed.form_id or ""
        self._submitter = submitter
        self._tracker = tracker
        self.state = SubmissionState.IDLE
        self.errors: dict[str, str] = {}
        self.answers: dict[str, Any] = self._initial_answers()
        self._started = False
        self._track(EventType.VIEW)

    def _initial_answers(self) -> dict[str, Any]:
        return {
            item.id: item.default_value
            for item in self.form.fields
            if item.accepts_input and item.default_value is not None
        }

    def _track(self, event_type: EventType, data: Mapping[str, Any] | None = None) -> None:
        if self._tracker is None or not self.form_id:
            return
        try:
            self._tracker.track_event(self.form_id, event_type, dict(data or {}))
        except Exception as e:
            logger.warning(f"Failed to track {event_type.value} for {self.form_id}: {e}")

    # =========================================================================
    # Answers
    # =========================================================================

    def set_answer(self, field_id: str, value: Any) -> None:
        """Record an answer and clear that field's error.

        Raises:
            FieldNotFoundError: If the form has no such field.
            InvalidSchemaError: If the field does not accept input.
        """
        item = self.form.get_field(field_id)
        if not item.accepts_input:
            raise InvalidSchemaError(f"Field '{field_id}' does not accept input")
        self.answers[field_id] = value
        self.errors.pop(field_id, None)
        if not self._started:
            self._started = True
            self._track(EventType.START, {"field_id": field_id})

    def clear_answer(self, field_id: str) -> None:
        if self.form.find_field(field_id) is None:
            raise FieldNotFoundError(field_id)
        self.answers.pop(field_id, None)
        self.errors.pop(field_id, None)

    def validate(self) -> ValidationResult:
        """Validate the current answers and remember the errors."""
        result = validate_answers(self.form, self.answers)
        self.errors = dict(result.errors)
        return result

    def can_submit(self) -> bool:
        return self.state != SubmissionState.SUBMITTING and not missing_required(
            self.form, self.answers
        )

    def reset(self) -> None:
        self.answers = self._initial_answers()
        self.errors = {}
        self._started = False

    def render(self) -> FormPresentation:
        """Fill-mode presentation of the current answers and errors."""
        return render(
            self.form,
            RenderMode.FILL,
            answers=self.answers,
            errors=self.errors,
            submitting=self.state == SubmissionState.SUBMITTING,
        )

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(
        self,
        user_agent: str | None = None,
        referrer: str | None = None,
        extra_metadata: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate and hand the answers to the submitter.

        Returns:
            The validation result. When invalid, nothing is sent and the
            state is unchanged.

        Raises:
            SubmissionInProgressError: If a submit is already pending.
            SubmissionFailedError: If the submitter fails; answers are kept.
        """
        if self.state == SubmissionState.SUBMITTING:
            raise SubmissionInProgressError("A submission is already in progress")

        result = self.validate()
        if not result.valid:
            logger.debug(f"Submission blocked by {len(result.errors)} invalid field(s)")
            return result

        self.state = SubmissionState.SUBMITTING
        metadata = build_submission_metadata(
            self.embed, user_agent=user_agent, referrer=referrer, extra=extra_metadata
        )
        try:
            await self._submitter.submit_form_response(
                self.form_id, dict(self.answers), metadata
            )
        except SubmissionFailedError as e:
            self.state = SubmissionState.FAILED
            logger.error(f"Submission for form {self.form_id} failed: {e}")
            raise
        except Exception as e:
            self.state = SubmissionState.FAILED
            logger.error(f"Submission for form {self.form_id} failed: {e}")
            raise SubmissionFailedError(str(e)) from e

        self.state = SubmissionState.SUCCEEDED
        self._track(EventType.SUBMIT)
        self.reset()
        return result


__all__ = [
    "SubmissionState",
    "EmbedContext",
    "build_submission_metadata",
    "FillSession",
]
