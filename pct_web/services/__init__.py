from .comparison_service import ComparisonService
from .session_gate import SessionGate
from .url_normalization import UrlNormalizer, GuessComUrlNormalizer

__all__ = [
    "ComparisonService",
    "SessionGate",
    "UrlNormalizer",
    "GuessComUrlNormalizer",
]
