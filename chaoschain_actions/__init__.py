"""
ChaosChain actions - Python package.

This package contains:
- Command schemas and validation for the six ChaosChain commands
- Context composition from conversation state
- LLM extraction via tool-calling
- The action registry and dispatcher
- An async client for the ChaosChain API
- A FastAPI surface for invoking actions
"""

__all__ = [
    "models",
    "schemas",
    "templates",
    "context",
    "llm",
    "actions",
    "orchestrator",
    "reporter",
    "api",
]
