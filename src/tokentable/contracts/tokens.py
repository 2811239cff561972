"""Authorization code domain value.

Clients and scopes are referenced by id only. Resolving them back to full
client/scope objects is the identity server's job, not the store's.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field, field_validator

# Lifetimes are 32-bit signed ints in tables written by existing deployments
MAX_LIFETIME_SECONDS = 2**31 - 1


class AuthorizationCode(BaseModel):
    """An authorization code issued during an authorization code flow.

    The store only interprets client_id (issuer) and subject_id (owner).
    Every other field is carried opaquely through the codec.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    code: str = Field(min_length=1, description="Handle presented by the client")
    client_id: str = Field(min_length=1, description="Client the code was issued to")
    subject_id: str = Field(min_length=1, description="Subject the code represents")
    redirect_uri: str = Field(description="Redirect URI used in the authorize request")
    requested_scopes: tuple[str, ...] = Field(default=(), description="Scope names")
    creation_time: datetime = Field(description="UTC issue time")
    lifetime_seconds: int = Field(
        default=300, gt=0, le=MAX_LIFETIME_SECONDS, description="Validity window"
    )
    nonce: str | None = None
    session_id: str | None = None
    is_open_id: bool = False
    was_consent_shown: bool = False
    code_challenge: str | None = None
    code_challenge_method: str | None = None

    @field_validator("creation_time")
    @classmethod
    def validate_timezone_aware(cls, v: datetime) -> datetime:
        """Naive datetimes are ambiguous once serialized."""
        if v.tzinfo is None:
            raise ValueError("creation_time must be timezone-aware")
        return v

    @property
    def expires_at(self) -> datetime:
        """Time after which the code must no longer be redeemed.

        Informational only. The store performs no expiry.
        """
        return self.creation_time + timedelta(seconds=self.lifetime_seconds)
