# src/services/intent_extractor.py

"""Free-text query → structured SearchIntent, and intent → search string."""

import asyncio
import json
import logging
from typing import Any, cast

from src.config.settings import Settings
from src.models.search import SearchIntent
from src.scrapers.errors import CollaboratorError
from src.services.text_generator import TextGenerator

logger = logging.getLogger("merch_search.intent")

BASE_TERMS: tuple[str, ...] = ("Formula 1", "F1")

INTENT_SYSTEM_PROMPT = """You are an AI assistant specialized in understanding F1 merchandise search queries.
Extract search intent and return ONLY valid JSON with this exact structure:
{
  "item": "product type (e.g., hoodie, cap, t-shirt, jacket, model, flag)",
  "team": "F1 team name (e.g., Red Bull, Ferrari, Mercedes, McLaren, Aston Martin, Alpine, Williams)",
  "driver": "driver name (e.g., Verstappen, Hamilton, Leclerc, Russell, Alonso, Norris)",
  "budget": number (maximum price in dollars, only if mentioned),
  "category": "category (e.g., clothing, accessories, collectibles, models)"
}

Only include fields that are clearly mentioned or can be confidently inferred. Use null for missing fields.
Return ONLY the JSON object, no additional text."""


def build_search_query(intent: SearchIntent) -> str:
    """Fold intent fields into the string sent to every target."""
    terms: list[str] = list(BASE_TERMS)
    for value in (intent.team, intent.driver, intent.item, intent.category):
        if value:
            terms.append(value)
    query = " ".join(terms)
    logger.debug("Built search query '%s' from %s", query, intent)
    return query


class IntentExtractor:
    """Best-effort intent extraction; returns an empty intent on failure."""

    def __init__(self, collaborator: TextGenerator) -> None:
        self.collaborator = collaborator

    def _parse(self, content: str) -> SearchIntent:
        try:
            data: object = json.loads(content.strip().strip("`"))
        except json.JSONDecodeError:
            logger.error(
                "Failed to parse intent JSON: %s", content[:200]
            )
            return SearchIntent()
        if not isinstance(data, dict):
            return SearchIntent()
        return SearchIntent.from_dict(cast(dict[str, Any], data))

    async def extract_intent(self, query_text: str) -> SearchIntent:
        """Ask the collaborator for the intent behind *query_text*."""
        logger.info("Extracting search intent for '%s'", query_text)
        try:
            content = await asyncio.to_thread(
                self.collaborator.request,
                query_text,
                INTENT_SYSTEM_PROMPT,
                Settings.INTENT_MAX_TOKENS,
            )
        except CollaboratorError as exc:
            logger.warning("Intent extraction failed: %s", exc)
            return SearchIntent()
        except Exception:
            logger.error("Intent extraction crashed", exc_info=True)
            return SearchIntent()

        intent = self._parse(content)
        logger.info("Intent extracted: %s", intent.to_dict())
        return intent
