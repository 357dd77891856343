"""Summaries of deployment workflow events for debugging failed rollouts."""

__version__ = "0.1.0"
