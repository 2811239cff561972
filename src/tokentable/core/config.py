# src/tokentable/core/config.py
"""
Configuration schema and loading for tokentable.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

IMPORTANT: Connection strings and service principal secrets should be
passed via environment variables, not hardcoded in configuration files.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Self

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from tokentable.contracts.enums import AuthMethod
from tokentable.contracts.errors import ConfigurationError

if TYPE_CHECKING:
    from azure.core.credentials_async import AsyncTokenCredential
    from azure.data.tables.aio import TableServiceClient

DEFAULT_TABLE_NAME = "AuthorizationCodes"

# Azure table names: alphanumeric, 3-63 chars, must not start with a digit
_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]{2,62}$")


class RetrySettings(BaseModel):
    """Transport retry behavior for the table service client.

    Retries happen inside the Azure SDK pipeline. The store never retries
    on its own.
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=0, description="Maximum retry attempts")
    initial_delay_seconds: float = Field(
        default=0.8, gt=0, description="Initial backoff delay"
    )
    max_delay_seconds: float = Field(
        default=60.0, gt=0, description="Maximum backoff delay"
    )

    def to_client_kwargs(self) -> dict[str, Any]:
        """Translate to azure-core retry policy keyword arguments."""
        return {
            "retry_total": self.max_attempts,
            "retry_backoff_factor": self.initial_delay_seconds,
            "retry_backoff_max": self.max_delay_seconds,
        }


class TableStorageSettings(BaseModel):
    """Azure Table Storage location and authentication.

    Supports three methods (mutually exclusive):
    1. connection_string - Simple connection string auth
    2. use_managed_identity + account_url - Azure Managed Identity
    3. tenant_id + client_id + client_secret + account_url - Service Principal

    Example configurations:

        # Option 1: Connection string (simplest)
        storage:
          connection_string: "${AZURE_STORAGE_CONNECTION_STRING}"

        # Option 2: Managed Identity (for Azure-hosted workloads)
        storage:
          use_managed_identity: true
          account_url: "https://mystorageaccount.table.core.windows.net"
          table_name: AuthorizationCodes
    """

    model_config = {"frozen": True, "extra": "forbid"}

    table_name: str = Field(
        default=DEFAULT_TABLE_NAME, description="Backing table name"
    )

    # Option 1: Connection string
    connection_string: str | None = None

    # Option 2: Managed Identity
    use_managed_identity: bool = False
    account_url: str | None = None

    # Option 3: Service Principal
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        if not _TABLE_NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid table name '{v}': must be 3-63 alphanumeric characters "
                "and start with a letter"
            )
        return v

    @model_validator(mode="after")
    def validate_auth_method(self) -> Self:
        """Ensure exactly one auth method is configured.

        Raises:
            ValueError: If zero or multiple auth methods are configured, or
                one is only partly configured.
        """
        has_conn_string = self.connection_string is not None and bool(
            self.connection_string.strip()
        )
        has_managed_identity = (
            self.use_managed_identity and self.account_url is not None
        )
        has_service_principal = all(
            [
                self.tenant_id is not None,
                self.client_id is not None,
                self.client_secret is not None,
                self.account_url is not None,
            ]
        )

        active_count = sum(
            [has_conn_string, has_managed_identity, has_service_principal]
        )

        # Partial configurations get a specific message instead of "none configured"
        if active_count == 0 and self.use_managed_identity:
            raise ValueError(
                "Managed Identity auth requires account_url. "
                "Example: https://mystorageaccount.table.core.windows.net"
            )

        sp_fields = [self.tenant_id, self.client_id, self.client_secret]
        if active_count == 0 and any(f is not None for f in sp_fields):
            missing = []
            if self.tenant_id is None:
                missing.append("tenant_id")
            if self.client_id is None:
                missing.append("client_id")
            if self.client_secret is None:
                missing.append("client_secret")
            if self.account_url is None:
                missing.append("account_url")
            raise ValueError(
                f"Service Principal auth requires all fields. Missing: {', '.join(missing)}"
            )

        if active_count == 0:
            raise ValueError(
                "No authentication method configured. Provide one of: "
                "connection_string, "
                "managed identity (use_managed_identity + account_url), or "
                "service principal (tenant_id + client_id + client_secret + account_url)"
            )

        if active_count > 1:
            raise ValueError(
                "Multiple authentication methods configured. Provide exactly one of: "
                "connection_string, "
                "managed identity (use_managed_identity + account_url), or "
                "service principal (tenant_id + client_id + client_secret + account_url)"
            )

        return self

    @property
    def auth_method(self) -> AuthMethod:
        """Return the active authentication method."""
        if self.connection_string:
            return AuthMethod.CONNECTION_STRING
        elif self.use_managed_identity:
            return AuthMethod.MANAGED_IDENTITY
        else:
            return AuthMethod.SERVICE_PRINCIPAL

    def create_credential(self) -> AsyncTokenCredential | None:
        """Create the async token credential for identity-based auth.

        Returns:
            None for connection string auth (the key travels in the string),
            otherwise an azure-identity credential the caller must close.
        """
        if self.auth_method is AuthMethod.CONNECTION_STRING:
            return None

        if self.auth_method is AuthMethod.MANAGED_IDENTITY:
            from azure.identity.aio import DefaultAzureCredential

            return DefaultAzureCredential()

        from azure.identity.aio import ClientSecretCredential

        # All fields are validated to be not None by the model_validator
        assert self.tenant_id is not None
        assert self.client_id is not None
        assert self.client_secret is not None
        return ClientSecretCredential(
            tenant_id=self.tenant_id,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )

    def create_table_service_client(
        self,
        retry: RetrySettings | None = None,
        credential: AsyncTokenCredential | None = None,
    ) -> TableServiceClient:
        """Create an async TableServiceClient using the configured auth method.

        Args:
            retry: Transport retry policy; azure-core defaults if omitted
            credential: Token credential for identity-based auth; created
                from settings if omitted

        Returns:
            TableServiceClient configured with the appropriate credentials.
        """
        from azure.data.tables.aio import TableServiceClient

        client_kwargs = retry.to_client_kwargs() if retry is not None else {}

        if self.auth_method is AuthMethod.CONNECTION_STRING:
            assert self.connection_string is not None  # Validated by model_validator
            return TableServiceClient.from_connection_string(
                self.connection_string, **client_kwargs
            )

        # account_url is validated to be not None by the model_validator
        assert self.account_url is not None
        if credential is None:
            credential = self.create_credential()
        return TableServiceClient(
            self.account_url, credential=credential, **client_kwargs
        )


class PartitionSettings(BaseModel):
    """Partition key derivation configuration.

    Changing prefix_length on a populated table orphans every existing
    record: lookups would compute a different partition.
    """

    model_config = {"frozen": True}

    prefix_length: int = Field(
        default=2,
        ge=1,
        le=16,
        description="Hex chars of the key digest used as partition id",
    )


class RevokeSettings(BaseModel):
    """Bulk revoke and enumeration configuration."""

    model_config = {"frozen": True}

    max_concurrent_deletes: int | None = Field(
        default=None,
        gt=0,
        description="Cap on in-flight deletes per revoke (None = unbounded)",
    )
    page_size: int | None = Field(
        default=None,
        gt=0,
        le=1000,
        description="Records per query segment (service default if omitted)",
    )


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = Field(
        default=False, description="Render log lines as JSON instead of console"
    )


class TokenTableSettings(BaseModel):
    """Top-level tokentable configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    storage: TableStorageSettings = Field(
        description="Table service location and credentials",
    )
    partition: PartitionSettings = Field(
        default_factory=PartitionSettings,
        description="Partition key derivation",
    )
    revoke: RevokeSettings = Field(
        default_factory=RevokeSettings,
        description="Bulk revoke and enumeration",
    )
    retry: RetrySettings = Field(
        default_factory=RetrySettings,
        description="Transport retry behavior",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Structured logging",
    )


def load_settings(config_path: Path) -> TokenTableSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TOKENTABLE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TOKENTABLE_STORAGE__CONNECTION_STRING for
    nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated TokenTableSettings instance

    Raises:
        ConfigurationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TOKENTABLE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): _lower_keys(v)
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }
    try:
        return TokenTableSettings(**raw_config)
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e) from e


def _lower_keys(value: Any) -> Any:
    """Lowercase nested dict keys (env overrides arrive uppercased)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
