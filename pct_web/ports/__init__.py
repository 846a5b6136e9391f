from .identity import IdentityVerifier
from .llm import LlmClient

__all__ = [
    "IdentityVerifier",
    "LlmClient",
]
