"""Prompt templates for wine enrichment."""

from wine_concierge.core.schema import Wine
from wine_concierge.enrichment.config import DEFAULT_NOTES_LANGUAGE, GuideRegistry
from wine_concierge.services.ai.client import ChatMessage

PROMPT_VERSION = "1.0"

# Attributes the model is asked to infer when the wine does not have them yet
INFERABLE_FIELDS = ("region", "denomination", "grape_varieties")

SYSTEM_PROMPT = """You are an expert Italian sommelier with encyclopedic knowledge of \
wine guides and appellations. Reply only with valid JSON."""

ENRICHMENT_PROMPT_TEMPLATE = """Analyze this wine and provide detailed information about it.

WINE:
{known_attributes}

MISSING INFORMATION TO FILL IN:
{missing_section}

REQUEST:
Provide the following information in JSON format:

{{
  "ratings": [
    {{
      "guide_id": {guide_ids},
      "guide_name": "Guide name",
      "score": "score or award as the guide expresses it",
      "confidence": 0.0-1.0,
      "year": year of the evaluation or null
    }}
  ],
{inferred_fields}  "tasting_notes": "Tasting notes in {notes_language} (max 200 characters)",
  "suggested_pairings": ["pairing1", "pairing2", "pairing3"]
}}

RULES:
- Include ONLY ratings you know with certainty
- confidence < 0.4 = unsure, the rating will be discarded
- confidence 0.4-0.7 = probable
- confidence > 0.7 = high certainty
- If you know no ratings, return an empty "ratings" array
- Use only the guide_id values listed above
- Tasting notes in {notes_language}, concise
- Fill region, denomination and grape_varieties ONLY if listed as missing above
- Use the wine name, producer and vintage to deduce the missing information

Output ONLY the JSON object, no markdown code blocks or additional text."""

# Schema lines added to the reply format only for attributes the wine lacks
_FIELD_SCHEMA_LINES = {
    "region": '  "region": "Italian region of production",\n',
    "denomination": '  "denomination": "Denomination (DOC, DOCG, IGT, etc.)",\n',
    "grape_varieties": '  "grape_varieties": ["grape1", "grape2"],\n',
}


def missing_fields(wine: Wine) -> list[str]:
    """
    List the inferable attributes the wine does not have yet.

    Args:
        wine: The wine being enriched.

    Returns:
        Subset of INFERABLE_FIELDS, in that order.
    """
    missing = []
    if not (wine.region or "").strip():
        missing.append("region")
    if not (wine.denomination or "").strip():
        missing.append("denomination")
    if not wine.grape_varieties:
        missing.append("grape_varieties")
    return missing


def _known_attributes(wine: Wine) -> str:
    lines = [f"- Name: {wine.name}"]
    if wine.producer:
        lines.append(f"- Producer: {wine.producer}")
    if wine.region:
        lines.append(f"- Region: {wine.region}")
    if wine.denomination:
        lines.append(f"- Denomination: {wine.denomination}")
    if wine.year:
        lines.append(f"- Vintage: {wine.year}")
    if wine.grape_varieties:
        lines.append(f"- Grape varieties: {', '.join(wine.grape_varieties)}")
    lines.append(f"- Type: {wine.wine_type.value}")
    return "\n".join(lines)


def build_enrichment_prompt(
    wine: Wine,
    guides: GuideRegistry,
    notes_language: str = DEFAULT_NOTES_LANGUAGE,
) -> str:
    """
    Build the enrichment prompt for a wine.

    Known attributes are listed as context; region, denomination and grape
    varieties appear in the reply schema only when the wine is missing them.

    Args:
        wine: The wine to enrich.
        guides: Registry of recognized rating guides.
        notes_language: Language for the tasting notes.

    Returns:
        The formatted prompt string.
    """
    missing = missing_fields(wine)

    if missing:
        missing_section = "\n".join(f"- {field}" for field in missing)
    else:
        missing_section = "- none (all descriptive attributes are known)"

    guide_ids = " | ".join(f'"{guide.id}"' for guide in guides.list_guides())

    return ENRICHMENT_PROMPT_TEMPLATE.format(
        known_attributes=_known_attributes(wine),
        missing_section=missing_section,
        guide_ids=guide_ids,
        inferred_fields="".join(_FIELD_SCHEMA_LINES[field] for field in missing),
        notes_language=notes_language,
    )


def build_enrichment_messages(
    wine: Wine,
    guides: GuideRegistry,
    notes_language: str = DEFAULT_NOTES_LANGUAGE,
) -> list[ChatMessage]:
    """Build the system and user messages for one enrichment call."""
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_enrichment_prompt(wine, guides, notes_language)),
    ]
