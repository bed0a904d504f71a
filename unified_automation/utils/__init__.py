"""Utility helpers for journeys and page objects."""

from .wait import WaitConfig, wait_for_condition

__all__ = ["WaitConfig", "wait_for_condition"]
