######## models.py
########

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Tone(str, Enum):
    NEUTRAL = "neutral"
    DETAILED = "detailed"
    CONCISE = "concise"
    BUSINESS = "business"
    CONSUMER = "consumer"


class OutputFormat(str, Enum):
    MARKDOWN = "markdown"
    STRUCTURED = "structured"
    TABLE = "table"
    REPORT = "report"


class Layout(str, Enum):
    SIDE_BY_SIDE = "side-by-side"
    SEQUENTIAL = "sequential"
    MATRIX = "matrix"


class PromptVerbosity(str, Enum):
    FULL = "full"          # adds section guidelines and quality standards
    COMPACT = "compact"    # tone/format/layout blocks and generic guidelines only


DEFAULT_SECTIONS: tuple[str, ...] = (
    "Features & Functionality",
    "Pricing & Plans",
    "User Experience & Interface",
    "Integrations & Compatibility",
    "Performance & Reliability",
    "Security & Privacy",
    "Customer Support",
    "Pros & Cons",
    "Ideal Use Cases",
    "Final Recommendation",
)


@dataclass(frozen=True)
class Product:
    name: str = ""
    url: str = ""
    description: str = ""


@dataclass(frozen=True)
class ComparisonSettings:
    # tone/format/layout stay plain strings: values posted by a stale form
    # may not map to an enum member and must still compose.
    tone: str = Tone.NEUTRAL.value
    format: str = OutputFormat.MARKDOWN.value
    layout: str = Layout.SIDE_BY_SIDE.value
    sections: tuple[str, ...] = DEFAULT_SECTIONS
    custom_sections: str = ""
    verbosity: str = PromptVerbosity.FULL.value


@dataclass(frozen=True)
class ComposedPrompt:
    prompt: str
    preview: str


@dataclass(frozen=True)
class ComparisonResult:
    status: str                 # "ok" | "failed"
    run_id: str
    content: str
    error: str
    generated_at: str
    duration_seconds: int


@dataclass(frozen=True)
class UserInfo:
    id: str
    email: str = ""
    name: str = ""
    picture: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name, "picture": self.picture}

    @staticmethod
    def from_dict(raw: dict) -> "UserInfo":
        return UserInfo(
            id=str(raw.get("id") or ""),
            email=str(raw.get("email") or ""),
            name=str(raw.get("name") or ""),
            picture=str(raw.get("picture") or ""),
        )


@dataclass
class ComparisonRecord:
    run_id: str
    owner: str
    product_a: Product
    product_b: Product
    settings: ComparisonSettings
    composed: ComposedPrompt
    result: Optional[ComparisonResult] = None
    created_at: datetime = field(default_factory=datetime.now)
