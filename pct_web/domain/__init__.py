from .errors import AuthError, CompareError, ComparisonBusyError, ExportError, ValidationError
from .models import (
    DEFAULT_SECTIONS,
    ComparisonRecord,
    ComparisonResult,
    ComparisonSettings,
    ComposedPrompt,
    Layout,
    OutputFormat,
    Product,
    PromptVerbosity,
    Tone,
    UserInfo,
)

__all__ = [
    "AuthError",
    "CompareError",
    "ComparisonBusyError",
    "ExportError",
    "ValidationError",
    "DEFAULT_SECTIONS",
    "ComparisonRecord",
    "ComparisonResult",
    "ComparisonSettings",
    "ComposedPrompt",
    "Layout",
    "OutputFormat",
    "Product",
    "PromptVerbosity",
    "Tone",
    "UserInfo",
]
