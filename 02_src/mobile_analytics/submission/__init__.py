"""Submission module."""

from .submitter import NON_RETRYABLE_EXCEPTIONS, ISubmitter, Submitter, is_retryable

__all__ = ["ISubmitter", "Submitter", "NON_RETRYABLE_EXCEPTIONS", "is_retryable"]
