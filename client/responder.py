"""
Chat Response Resolver
Answers a query from canned intents first, then from the knowledge store
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from client.query_patterns import detect_intent
from tools.knowledge_base.text_processor import normalize

logger = logging.getLogger("kb_client")


@dataclass
class Resolution:
    text: str
    source: str  # greeting / farewell / exact / fuzzy / none

    @property
    def answered(self) -> bool:
        return bool(self.text)


class ResponseResolver:
    def __init__(self, store, rng: Optional[random.Random] = None):
        self.store = store
        self._rng = rng or random.Random()

    def resolve(self, query: str) -> Resolution:
        normalized = normalize(query)

        intent = detect_intent(normalized)
        if intent is not None:
            return Resolution(self._rng.choice(intent.responses), intent.name)

        match = self.store.lookup(normalized)
        if match is None:
            logger.info(f"❓ No answer for: '{normalized}'")
            return Resolution("", "none")

        if not match.exact:
            logger.info(f"🔎 Fuzzy match '{match.question}' (score {match.score:.2f})")
        return Resolution(match.answer, "exact" if match.exact else "fuzzy")

    def respond(self, query: str) -> str:
        """Answer text, or "" when neither an intent nor the store has one"""
        return self.resolve(query).text
