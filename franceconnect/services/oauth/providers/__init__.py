"""OAuth providers module."""
from .base import ProviderSpec
from .franceconnect import FranceConnectProvider

__all__ = ["ProviderSpec", "FranceConnectProvider"]
