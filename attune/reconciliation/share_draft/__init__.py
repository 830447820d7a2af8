"""Suggested drafts for context a subject may share."""

from attune.reconciliation.share_draft.service import (
    ShareDraftUnavailableError,
    ShareDraftWriter,
)

__all__ = [
    "ShareDraftUnavailableError",
    "ShareDraftWriter",
]
