"""Tests for fill sessions.

Tests cover:
- Embed context parsing and submission metadata
- Answer map handling and validation
- Submission state machine (success, failure, in-progress guard)
- End-to-end contact form scenario through storage
"""

import asyncio

import pytest

from formsmith.core.errors import (
    FieldNotFoundError,
    InvalidSchemaError,
    SubmissionFailedError,
    SubmissionInProgressError,
)
from formsmith.schema import FieldKind, FieldSchema, FormSchema
from formsmith.storage import EventType
from formsmith.submit import StorageSubmitter

from .lib import EmbedContext, FillSession, SubmissionState, build_submission_metadata

# =============================================================================
# Fakes
# =============================================================================


class RecordingSubmitter:
    """Submitter that keeps every call."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[str, dict, dict]] = []
        self.error = error

    async def submit_form_response(self, form_id, answers, metadata):
        self.calls.append((form_id, dict(answers), dict(metadata)))
        if self.error is not None:
            raise self.error


class BlockingSubmitter:
    """Submitter that waits until released."""

    def __init__(self):
        self.release = asyncio.Event()
        self.entered = asyncio.Event()

    async def submit_form_response(self, form_id, answers, metadata):
        self.entered.set()
        await self.release.wait()


class RecordingTracker:
    def __init__(self):
        self.events: list[tuple[str, EventType, dict]] = []

    def track_event(self, form_id, event_type, event_data=None):
        self.events.append((form_id, event_type, event_data or {}))


# =============================================================================
# Embed Context
# =============================================================================


@pytest.mark.unit
class TestEmbedContext:
    """Tests for EmbedContext and submission metadata."""

    def test_from_query_params(self):
        ctx = EmbedContext.from_query_params(
            {
                "id": "form-1",
                "userId": "42",
                "userName": "Ann",
                "userEmail": "ann@example.com",
                "userCompany": "Acme",
                "plan": "pro",
            }
        )
        assert ctx.form_id == "form-1"
        assert ctx.user_id == "42"
        assert ctx.user_company == "Acme"
        assert ctx.extras == {"plan": "pro"}

    def test_multi_valued_params_keep_first(self):
        ctx = EmbedContext.from_query_params({"userId": ["7", "8"]})
        assert ctx.user_id == "7"

    def test_to_metadata(self):
        ctx = EmbedContext(user_id="42", user_email="a@x.io", extras={"plan": "pro"})
        assert ctx.to_metadata() == {
            "userId": "42",
            "userEmail": "a@x.io",
            "plan": "pro",
        }

    def test_build_submission_metadata(self):
        metadata = build_submission_metadata(
            EmbedContext(user_id="42"),
            user_agent="pytest",
            referrer="https://host.example",
            extra={"source": "embed"},
        )
        assert metadata["user_agent"] == "pytest"
        assert metadata["referrer"] == "https://host.example"
        assert metadata["userId"] == "42"
        assert metadata["source"] == "embed"
        assert "submitted_at" in metadata


# =============================================================================
# Answers
# =============================================================================


@pytest.mark.unit
class TestAnswers:
    """Tests for the session answer map."""

    def test_session_copies_form(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        contact_form.fields.clear()
        assert session.form.field_ids == ["name", "email", "topic"]

    def test_defaults_seed_answers(self):
        form = FormSchema(
            fields=[
                FieldSchema(id="n", kind=FieldKind.NUMBER, label="N", default_value=5),
                FieldSchema(
                    id="h", kind=FieldKind.HEADING, label="Hi", default_value="ignored"
                ),
            ]
        )
        session = FillSession(form, RecordingSubmitter())
        assert session.answers == {"n": 5}

    def test_set_answer_unknown_field(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        with pytest.raises(FieldNotFoundError):
            session.set_answer("missing", "x")

    def test_set_answer_static_field(self):
        form = FormSchema(fields=[FieldSchema(id="d", kind=FieldKind.DIVIDER)])
        session = FillSession(form, RecordingSubmitter())
        with pytest.raises(InvalidSchemaError):
            session.set_answer("d", "x")

    def test_set_answer_clears_error(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        session.validate()
        assert "name" in session.errors
        session.set_answer("name", "Ann")
        assert "name" not in session.errors
        assert "email" in session.errors

    def test_clear_answer(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        session.set_answer("name", "Ann")
        session.clear_answer("name")
        assert "name" not in session.answers
        with pytest.raises(FieldNotFoundError):
            session.clear_answer("missing")

    def test_can_submit_tracks_required(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        assert not session.can_submit()
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")
        assert session.can_submit()

    def test_render_binds_answers_and_errors(self, contact_form):
        session = FillSession(contact_form, RecordingSubmitter())
        session.set_answer("name", "Ann")
        session.validate()

        presentation = session.render()

        assert presentation.widget_for("name").value == "Ann"
        assert presentation.widget_for("email").error == "Email is required"
        assert presentation.submit.disabled is True

    def test_tracks_view_and_start_once(self, contact_form):
        tracker = RecordingTracker()
        session = FillSession(
            contact_form, RecordingSubmitter(), form_id="form-1", tracker=tracker
        )
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")
        assert [event for _, event, _ in tracker.events] == [
            EventType.VIEW,
            EventType.START,
        ]


# =============================================================================
# Submission
# =============================================================================


@pytest.mark.unit
class TestSubmission:
    """Tests for the submission state machine."""

    @pytest.mark.asyncio
    async def test_invalid_answers_not_sent(self, contact_form):
        submitter = RecordingSubmitter()
        session = FillSession(contact_form, submitter, form_id="form-1")

        result = await session.submit()

        assert not result.valid
        assert submitter.calls == []
        assert session.state == SubmissionState.IDLE
        assert session.errors == {
            "name": "Name is required",
            "email": "Email is required",
        }

    @pytest.mark.asyncio
    async def test_success_resets_answers(self, contact_form):
        submitter = RecordingSubmitter()
        tracker = RecordingTracker()
        embed = EmbedContext(form_id="form-1", user_id="42")
        session = FillSession(contact_form, submitter, embed=embed, tracker=tracker)
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")

        result = await session.submit(user_agent="pytest")

        assert result.valid
        assert session.state == SubmissionState.SUCCEEDED
        assert session.answers == {}
        [(form_id, answers, metadata)] = submitter.calls
        assert form_id == "form-1"
        assert answers == {"name": "Ann", "email": "a@x.io"}
        assert metadata["userId"] == "42"
        assert metadata["user_agent"] == "pytest"
        assert tracker.events[-1][1] == EventType.SUBMIT

    @pytest.mark.asyncio
    async def test_failure_keeps_answers(self, contact_form):
        submitter = RecordingSubmitter(SubmissionFailedError("boom", status_code=500))
        session = FillSession(contact_form, submitter, form_id="form-1")
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")

        with pytest.raises(SubmissionFailedError):
            await session.submit()

        assert session.state == SubmissionState.FAILED
        assert session.answers == {"name": "Ann", "email": "a@x.io"}

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, contact_form):
        session = FillSession(
            contact_form, RecordingSubmitter(ConnectionError("offline")), form_id="f"
        )
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")

        with pytest.raises(SubmissionFailedError) as excinfo:
            await session.submit()
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, contact_form):
        submitter = RecordingSubmitter(SubmissionFailedError("boom"))
        session = FillSession(contact_form, submitter, form_id="form-1")
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")
        with pytest.raises(SubmissionFailedError):
            await session.submit()

        submitter.error = None
        result = await session.submit()

        assert result.valid
        assert session.state == SubmissionState.SUCCEEDED
        assert len(submitter.calls) == 2

    @pytest.mark.asyncio
    async def test_submit_while_pending(self, contact_form):
        submitter = BlockingSubmitter()
        session = FillSession(contact_form, submitter, form_id="form-1")
        session.set_answer("name", "Ann")
        session.set_answer("email", "a@x.io")

        pending = asyncio.create_task(session.submit())
        await submitter.entered.wait()

        assert session.state == SubmissionState.SUBMITTING
        assert session.render().submit.pending is True
        assert session.render().submit.label == "Submitting..."
        with pytest.raises(SubmissionInProgressError):
            await session.submit()

        submitter.release.set()
        await pending
        assert session.state == SubmissionState.SUCCEEDED


@pytest.mark.unit
class TestContactScenario:
    """End-to-end: build, store, fill and submit the contact form."""

    @pytest.mark.asyncio
    async def test_contact_form_round(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        session = FillSession(
            form_service.get_schema(stored.id),
            StorageSubmitter(form_service),
            form_id=stored.id,
            tracker=form_service,
        )

        session.set_answer("name", "Ann")
        blocked = await session.submit()
        assert blocked.errors == {"email": "Email is required"}

        session.set_answer("email", "ann@example.com")
        session.set_answer("topic", "support")
        result = await session.submit(referrer="https://site.example")

        assert result.valid
        [submission] = form_service.list_submissions(owner, stored.id)
        assert submission.data == {
            "name": "Ann",
            "email": "ann@example.com",
            "topic": "support",
        }
        assert submission.metadata["referrer"] == "https://site.example"

        stats = form_service.form_stats(owner, stored.id)
        assert stats["view"] == 1
        assert stats["start"] == 1
        assert stats["submit"] == 1
