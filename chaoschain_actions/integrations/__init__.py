"""
Integrations module for ChaosChain actions.

Contains clients for external services the actions call into.
"""
