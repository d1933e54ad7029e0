"""Scheduler module."""

from .scheduler import IScheduler, Scheduler

__all__ = ["IScheduler", "Scheduler"]
