"""Token stores."""

from tokentable.store.authorization_codes import AuthorizationCodeStore
from tokentable.store.base import TableTokenStore

__all__ = ["AuthorizationCodeStore", "TableTokenStore"]
