"""Batching module."""

from .batcher import HARD_BATCH_SIZE_LIMIT, Batcher

__all__ = ["Batcher", "HARD_BATCH_SIZE_LIMIT"]
