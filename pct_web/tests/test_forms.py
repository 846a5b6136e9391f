from werkzeug.datastructures import MultiDict

from pct_web.domain.models import DEFAULT_SECTIONS, ComparisonSettings, Product
from pct_web.services.url_normalization import GuessComUrlNormalizer
from pct_web.web import forms


NORM = GuessComUrlNormalizer(no_guess_hosts=frozenset({"localhost"}))


def test_clean_sections_keeps_known_names_in_order():
    raw = ["Pricing & Plans", "Bogus", " Customer Support ", "Pricing & Plans"]
    assert forms.clean_sections(raw) == ("Pricing & Plans", "Customer Support")


def test_form_parsing_normalizes_urls_and_reads_checkboxes():
    form = MultiDict([
        ("product_a_name", " Notion "),
        ("product_a_url", "notion.so"),
        ("product_b_name", "Evernote"),
        ("product_b_url", "evernote"),
        ("tone", "business"),
        ("sections", "Security & Privacy"),
        ("sections", "Features & Functionality"),
        ("custom_sections", "AI, Roadmap"),
    ])

    a, b = forms.products_from_form(form, NORM)
    settings = forms.settings_from_form(form, "compact")

    assert a == Product(name="Notion", url="https://notion.so")
    assert b.url == "https://evernote.com"
    assert settings.tone == "business"
    assert settings.format == "markdown"
    assert settings.sections == ("Security & Privacy", "Features & Functionality")
    assert settings.custom_sections == "AI, Roadmap"
    assert settings.verbosity == "compact"


def test_form_with_no_checkboxes_has_no_sections():
    settings = forms.settings_from_form(MultiDict(), "full")
    assert settings.sections == ()


def test_json_defaults_sections_when_missing():
    a, b, settings = forms.inputs_from_json({"productA": {"name": "Notion"}}, NORM, "full")
    assert a.name == "Notion"
    assert b == Product()
    assert settings.sections == DEFAULT_SECTIONS


def test_json_ignores_garbage_payload():
    a, b, settings = forms.inputs_from_json(["not", "a", "dict"], NORM, "full")
    assert a == Product() and b == Product()
    assert settings == ComparisonSettings()


def test_draft_round_trips_through_json_shape():
    a = Product(name="Notion", url="https://notion.so", description="Docs")
    b = Product(name="Evernote")
    settings = ComparisonSettings(tone="concise", sections=("Pricing & Plans",), custom_sections="AI")

    draft, clipped = forms.to_draft(a, b, settings)
    assert clipped is False
    assert draft["settings"]["customSections"] == "AI"
    assert forms.inputs_from_json(draft, NORM, "full") == (a, b, settings)


def test_draft_caps_free_text_fields():
    long_text = "x" * 5000
    a = Product(name=long_text, url="https://notion.so/" + long_text, description=long_text)
    settings = ComparisonSettings(custom_sections=long_text)

    draft, clipped = forms.to_draft(a, Product(description="short"), settings)

    assert clipped is True
    assert len(draft["productA"]["name"]) == forms.DRAFT_LIMITS["name"]
    assert len(draft["productA"]["url"]) == forms.DRAFT_LIMITS["url"]
    assert len(draft["productA"]["description"]) == forms.DRAFT_LIMITS["description"]
    assert len(draft["settings"]["customSections"]) == forms.DRAFT_LIMITS["customSections"]
    assert draft["productB"]["description"] == "short"
