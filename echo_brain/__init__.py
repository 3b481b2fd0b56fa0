"""
Echo Brain - a personal knowledge memory that answers from what you saved.

This package captures content as enriched, deduplicated memories and answers
natural-language questions from them with cited evidence and calibrated
confidence, within per-user entitlement limits.
"""

# Client interface (main entry point)
from echo_brain.client.echo_brain import EchoBrain

# Factory for creating brain systems
from echo_brain.factories.brain_factory import EchoBrainFactory

# Errors surfaced to callers
from echo_brain.domains.errors import (
    EchoError,
    EntitlementError,
    InputError,
    QuotaExceeded,
    SynthesisError,
    UserNotFoundError,
)

# Package metadata
__all__ = [
    # Main client interfaces
    "EchoBrain",
    # Factories
    "EchoBrainFactory",
    # Errors
    "EchoError",
    "EntitlementError",
    "InputError",
    "QuotaExceeded",
    "SynthesisError",
    "UserNotFoundError",
]
