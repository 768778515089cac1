"""Simulated clients for lanmafia sessions."""

from lanmafia.ai.stub_ai import (
    DEFAULT_NAMES,
    IntentSink,
    StubClient,
    create_stub_clients,
)

__all__ = [
    "DEFAULT_NAMES",
    "IntentSink",
    "StubClient",
    "create_stub_clients",
]
