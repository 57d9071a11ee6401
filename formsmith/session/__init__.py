"""Fill sessions: answer map, submission state machine and embed identity."""

from .lib import EmbedContext, FillSession, SubmissionState, build_submission_metadata

__all__ = [
    "SubmissionState",
    "EmbedContext",
    "build_submission_metadata",
    "FillSession",
]
