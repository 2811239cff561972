# tests/conftest.py
"""Shared test fixtures and helpers.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import os
from datetime import UTC, datetime
from typing import Any

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from tokentable.contracts import AuthorizationCode
from tokentable.gateway import InMemoryTableGateway
from tokentable.store import AuthorizationCodeStore

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))

# A fixed issue time keeps codes comparable across tests
ISSUED_AT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def make_code(
    code: str = "code-1",
    *,
    subject_id: str = "u1",
    client_id: str = "c1",
    **overrides: Any,
) -> AuthorizationCode:
    """Build an AuthorizationCode with sensible defaults."""
    fields: dict[str, Any] = {
        "code": code,
        "client_id": client_id,
        "subject_id": subject_id,
        "redirect_uri": "https://client.example/callback",
        "requested_scopes": ("openid", "profile"),
        "creation_time": ISSUED_AT,
    }
    fields.update(overrides)
    return AuthorizationCode(**fields)


@pytest.fixture
def code_factory():
    """Factory for AuthorizationCode values (see make_code)."""
    return make_code


@pytest.fixture
def gateway() -> InMemoryTableGateway:
    """In-memory gateway with a tiny page size to force pagination."""
    return InMemoryTableGateway(page_size=2)


@pytest.fixture
def store(gateway: InMemoryTableGateway) -> AuthorizationCodeStore:
    """Authorization code store over the in-memory gateway."""
    return AuthorizationCodeStore(gateway)
