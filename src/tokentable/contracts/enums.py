"""Status codes and field names used across subsystem boundaries."""

from enum import Enum


class RecordField(str, Enum):
    """Logical attribute names of a stored token record.

    Uses (str, Enum) because filter expressions are built from these names
    and each gateway maps them to its own physical column names.
    """

    PARTITION_ID = "partition_id"
    ROW_KEY = "row_key"
    ISSUER_ID = "issuer_id"
    OWNER_ID = "owner_id"
    PAYLOAD = "payload"


class AuthMethod(str, Enum):
    """Authentication method used to reach the table service."""

    CONNECTION_STRING = "connection_string"
    MANAGED_IDENTITY = "managed_identity"
    SERVICE_PRINCIPAL = "service_principal"
