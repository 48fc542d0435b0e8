# -*- coding: utf-8 -*-
"""
Error taxonomy.

User-facing errors (InvalidInputError, AnalysisTimeoutError) are safe to show
verbatim. ConfigurationError is meant for the operator.
"""
from __future__ import annotations

from typing import Optional


class SafetyKitError(Exception):
    """Base class for every error raised by safetykit."""


class InvalidInputError(SafetyKitError):
    """Empty or unusable input."""


class UpstreamUnavailableError(SafetyKitError):
    """An external service failed, timed out or answered with an error."""

    def __init__(self, source: str, message: str, status: Optional[int] = None):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message
        self.status = status


class AnalysisTimeoutError(SafetyKitError):
    """The reputation report was not ready within the poll budget."""


class ConfigurationError(SafetyKitError):
    """A required credential or setting is missing or rejected."""
