from .result_repository import ResultRepository

__all__ = [
    "ResultRepository",
]
