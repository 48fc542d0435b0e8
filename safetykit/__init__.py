# -*- coding: utf-8 -*-
"""
SafetyKit.
Aggregates URL, email and header reputation signals into one verdict.
"""
from safetykit.config import Settings
from safetykit.engine import SafetyScanner
from safetykit.errors import (
    AnalysisTimeoutError,
    ConfigurationError,
    InvalidInputError,
    SafetyKitError,
    UpstreamUnavailableError,
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "SafetyScanner",
    "SafetyKitError",
    "InvalidInputError",
    "UpstreamUnavailableError",
    "AnalysisTimeoutError",
    "ConfigurationError",
]
