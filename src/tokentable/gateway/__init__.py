"""Table gateways: the remote service seam of the store."""

from tokentable.gateway.azure import AzureTableGateway
from tokentable.gateway.base import TableGateway
from tokentable.gateway.memory import InMemoryTableGateway, MemoryTable

__all__ = ["AzureTableGateway", "InMemoryTableGateway", "MemoryTable", "TableGateway"]
