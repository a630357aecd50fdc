from .client import ChaosChainAuth, ChaosChainClient, NetworkClient

__all__ = ["ChaosChainAuth", "ChaosChainClient", "NetworkClient"]
