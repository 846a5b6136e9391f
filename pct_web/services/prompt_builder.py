"""
Prompt construction for the product comparison tool.

Everything here is a pure function of (Product A, Product B, ComparisonSettings):
no I/O, no clock, no globals that change at runtime. Callers validate names
and sections first; garbage in still composes, it just reads badly.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar

from pct_web.domain.models import (
    DEFAULT_SECTIONS,
    ComparisonSettings,
    ComposedPrompt,
    Layout,
    OutputFormat,
    Product,
    PromptVerbosity,
    Tone,
)

E = TypeVar("E", bound=Enum)

TONE_LABELS: dict[Tone, str] = {
    Tone.NEUTRAL: "Neutral & Objective",
    Tone.DETAILED: "Detailed & Technical",
    Tone.CONCISE: "Concise & Brief",
    Tone.BUSINESS: "Business-Focused",
    Tone.CONSUMER: "Consumer-Friendly",
}

FORMAT_LABELS: dict[OutputFormat, str] = {
    OutputFormat.MARKDOWN: "Markdown",
    OutputFormat.STRUCTURED: "Structured Text",
    OutputFormat.TABLE: "Comparison Table",
    OutputFormat.REPORT: "Executive Report",
}

LAYOUT_LABELS: dict[Layout, str] = {
    Layout.SIDE_BY_SIDE: "Side-by-Side Comparison",
    Layout.SEQUENTIAL: "Sequential Analysis",
    Layout.MATRIX: "Feature Matrix",
}

DEFAULT_TONE_LABEL = "neutral"
DEFAULT_FORMAT_LABEL = "Markdown"
DEFAULT_LAYOUT_LABEL = "Side-by-Side"

TONE_GUIDELINES: dict[Tone, tuple[str, ...]] = {
    Tone.NEUTRAL: (
        "Maintain complete objectivity and balance",
        "Present facts without bias or preference",
        'Use neutral language: "offers", "provides", "includes" rather than "excels" or "lacks"',
        "Avoid superlatives and emotional language",
        "Present both strengths and weaknesses equally",
    ),
    Tone.DETAILED: (
        "Provide comprehensive technical specifications and details",
        "Include specific version numbers, API capabilities, and technical limitations",
        "Use precise technical terminology and industry jargon",
        "Dive deep into architecture, integrations, and implementation details",
        "Include performance metrics, security protocols, and compliance standards",
    ),
    Tone.CONCISE: (
        "Keep explanations brief and to the point",
        "Use bullet points and short sentences",
        "Focus on key differentiators only",
        "Limit each section to 2-3 main points",
        "Prioritize actionable insights over detailed explanations",
    ),
    Tone.BUSINESS: (
        "Focus on ROI, cost-effectiveness, and business impact",
        "Emphasize scalability, enterprise features, and team collaboration",
        "Include total cost of ownership and implementation considerations",
        "Address decision-maker concerns: security, compliance, support",
        "Use business terminology: efficiency, productivity, competitive advantage",
    ),
    Tone.CONSUMER: (
        "Use friendly, accessible language avoiding technical jargon",
        "Focus on user experience, ease of use, and everyday benefits",
        "Emphasize value for money and practical applications",
        "Include learning curve and setup simplicity",
        "Address common user pain points and how each product solves them",
    ),
}

# {a} / {b} are replaced with the product names.
FORMAT_REQUIREMENTS: dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.MARKDOWN: (
        "Use proper Markdown syntax with headers (##, ###)",
        "Create comparison tables using | syntax",
        "Use bullet points (-) and numbered lists (1.)",
        "Include code blocks for technical details when relevant",
        "Use **bold** for key points and *italics* for emphasis",
    ),
    OutputFormat.STRUCTURED: (
        "Organize content in clear, numbered sections",
        "Use consistent paragraph structure with topic sentences",
        "Include summary boxes for key takeaways",
        "Use indentation and spacing for hierarchy",
        "End each section with a brief conclusion",
    ),
    OutputFormat.TABLE: (
        "Present ALL comparisons in table format",
        "Create separate tables for each major category",
        "Use consistent column headers: Feature | {a} | {b}",
        "Include rating symbols (★★★★☆) or checkmarks (✓/✗) where appropriate",
        "Add a summary comparison table at the end",
    ),
    OutputFormat.REPORT: (
        "Structure as a formal business report with executive summary",
        "Include methodology section explaining comparison criteria",
        "Use professional headings and subheadings",
        "Add conclusions and recommendations section",
        "Include appendices for detailed specifications",
    ),
}

LAYOUT_REQUIREMENTS: dict[Layout, tuple[str, ...]] = {
    Layout.SIDE_BY_SIDE: (
        "Create side-by-side comparison tables for EVERY category",
        "Use consistent two-column format: {a} | {b}",
        "Include direct feature-to-feature comparisons in each row",
        "Add visual indicators (✓, ✗, ★) for quick scanning",
        "Ensure parallel structure - same aspects compared for both products",
        'Include "Winner" or "Better For" indicators in each section',
    ),
    Layout.SEQUENTIAL: (
        "Analyze each category by discussing both products together",
        'Use "Product A vs Product B" structure within each section',
        "Include direct comparisons and contrasts in the same paragraph",
        'End each section with a clear winner or "depends on use case" conclusion',
        'Use transition phrases: "In contrast", "Similarly", "However", "On the other hand"',
    ),
    Layout.MATRIX: (
        "Create comprehensive feature matrices with products as columns",
        "Use symbols: ✓ (full support), ◐ (partial), ✗ (not available), ★★★ (ratings)",
        "Group related features into logical categories",
        "Include scoring summary at the bottom of each matrix",
        "Add color-coding suggestions: Green (advantage), Yellow (neutral), Red (disadvantage)",
        "Create an overall score matrix summarizing all categories",
    ),
}

# Added to the guidelines (full verbosity) when the default section is selected.
SECTION_GUIDELINES: dict[str, str] = {
    "Features & Functionality": "Compare core features head-to-head and call out capabilities only one product offers",
    "Pricing & Plans": "Provide pricing information with specific numbers when available",
    "User Experience & Interface": "Include screenshots or feature descriptions for UI/UX comparisons",
    "Integrations & Compatibility": "Consider integration capabilities and ecosystem compatibility",
    "Performance & Reliability": "Reference published uptime, speed, and scalability data where available",
    "Security & Privacy": "Note certifications, data residency, and encryption practices for each product",
    "Customer Support": "Describe support channels, response times, and self-service resources",
    "Pros & Cons": "Include user reviews sentiment and common feedback themes",
    "Ideal Use Cases": "Address different user personas and use cases explicitly",
    "Final Recommendation": "Ground the final recommendation in the findings of the preceding sections",
}

GENERIC_GUIDELINES: tuple[str, ...] = (
    "Research current, accurate information about both products",
    "Include specific examples, features, and data points where possible",
    "Mention recent updates or changes to either product",
)

EXPECTED_OUTPUT_STRUCTURE: tuple[str, ...] = (
    "Executive Summary (2-3 sentences highlighting key differences)",
    "Quick Comparison Overview (key specs side-by-side)",
    "Detailed analysis following your specified format and layout",
    "Use Case Recommendations (who should choose which product)",
    "Final Verdict with specific scenarios",
)

QUALITY_STANDARDS: tuple[str, ...] = (
    "Ensure factual accuracy and cite sources when possible",
    "Maintain consistency in comparison criteria across all sections",
    "Provide actionable insights that help with decision-making",
    "Include both current state and future roadmap considerations",
    "Address potential deal-breakers or must-have features",
)

CLOSING_INSTRUCTION = (
    "Please follow these instructions precisely to create a comparison that matches "
    "the specified tone, format, and layout requirements."
)

PREVIEW_TEMPLATE = """# {a} vs {b} Comparison

| Category | {a} | {b} |
|----------|{rule_a}|{rule_b}|
| **Overview** | [Product A details] | [Product B details] |
| **Pricing** | [Pricing info] | [Pricing info] |
| **Key Features** | [Features list] | [Features list] |
| **Best For** | [Use cases] | [Use cases] |

## Quick Comparison
- **Winner in Features:** [Analysis]
- **Winner in Price:** [Analysis]
- **Winner in UX:** [Analysis]

## Recommendation
[Final recommendation based on different user needs]"""


def _resolve(enum_cls: type[E], raw) -> Optional[E]:
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def describe_settings(settings: ComparisonSettings) -> tuple[str, str, str]:
    """(tone, format, layout) display labels, with defaults for unknown values."""
    tone = _resolve(Tone, settings.tone)
    fmt = _resolve(OutputFormat, settings.format)
    layout = _resolve(Layout, settings.layout)
    return (
        TONE_LABELS.get(tone, DEFAULT_TONE_LABEL),
        FORMAT_LABELS.get(fmt, DEFAULT_FORMAT_LABEL),
        LAYOUT_LABELS.get(layout, DEFAULT_LAYOUT_LABEL),
    )


def parse_custom_sections(raw: str) -> list[str]:
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


def merge_sections(settings: ComparisonSettings) -> list[str]:
    """Fixed sections in submitted order, then custom ones. No de-duplication."""
    return list(settings.sections) + parse_custom_sections(settings.custom_sections)


def _block(title: str, lines, *, numbered: bool = False) -> str:
    if numbered:
        body = [f"{i}. {line}" for i, line in enumerate(lines, start=1)]
    else:
        body = [f"- {line}" for line in lines]
    return "\n".join([f"**{title}:**", *body])


def _product_block(tag: str, product: Product) -> str:
    text = f"**Product {tag}:** {product.name}"
    if product.url:
        text += f" ({product.url})"
    if product.description:
        text += f"\nDescription: {product.description}"
    return text


def _guidelines(sections: list[str], verbosity: PromptVerbosity) -> list[str]:
    lines: list[str] = []
    if verbosity is PromptVerbosity.FULL:
        present = set(sections)
        lines += [SECTION_GUIDELINES[s] for s in DEFAULT_SECTIONS if s in present]
    lines += GENERIC_GUIDELINES
    return lines


def build_prompt(product_a: Product, product_b: Product, settings: ComparisonSettings) -> str:
    tone_label, format_label, layout_label = describe_settings(settings)
    tone = _resolve(Tone, settings.tone)
    fmt = _resolve(OutputFormat, settings.format)
    layout = _resolve(Layout, settings.layout)
    verbosity = _resolve(PromptVerbosity, settings.verbosity) or PromptVerbosity.FULL

    names = {"a": product_a.name, "b": product_b.name}
    sections = merge_sections(settings)

    blocks = [
        "You are a professional product comparison analyst. "
        f"Create a comprehensive {layout_label.lower()} between these two products:",
        _product_block("A", product_a),
        _product_block("B", product_b),
        _block("Analysis Requirements", [
            f"**Tone:** {tone_label}",
            f"**Format:** {format_label}",
            f"**Layout:** {layout_label}",
        ]),
    ]

    # unknown values have no instructional block
    if tone is not None:
        blocks.append(_block("Tone Guidelines", TONE_GUIDELINES[tone]))
    if fmt is not None:
        blocks.append(_block("Format Requirements", [line.format(**names) for line in FORMAT_REQUIREMENTS[fmt]]))
    if layout is not None:
        blocks.append(_block("Layout Requirements", [line.format(**names) for line in LAYOUT_REQUIREMENTS[layout]]))

    blocks.append(_block("Comparison Categories", sections, numbered=True))
    blocks.append(_block("Specific Guidelines", _guidelines(sections, verbosity)))
    blocks.append(_block("Expected Output Structure", EXPECTED_OUTPUT_STRUCTURE, numbered=True))
    if verbosity is PromptVerbosity.FULL:
        blocks.append(_block("Quality Standards", QUALITY_STANDARDS))
    blocks.append(CLOSING_INSTRUCTION)

    return "\n\n".join(blocks)


def build_preview(product_a: Product, product_b: Product) -> str:
    if not product_a.name or not product_b.name:
        return ""
    return PREVIEW_TEMPLATE.format(
        a=product_a.name,
        b=product_b.name,
        rule_a="-" * (len(product_a.name) + 2),
        rule_b="-" * (len(product_b.name) + 2),
    )


def compose(product_a: Product, product_b: Product, settings: ComparisonSettings) -> ComposedPrompt:
    return ComposedPrompt(
        prompt=build_prompt(product_a, product_b, settings),
        preview=build_preview(product_a, product_b),
    )
