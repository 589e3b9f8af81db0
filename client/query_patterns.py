"""
Canned Intent Patterns for the Chat Client
Greeting / farewell detection and their response pools
"""

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Tuple


@dataclass(frozen=True)
class Intent:
    name: str
    triggers: Tuple[str, ...]
    responses: Tuple[str, ...]

    @cached_property
    def pattern(self) -> "re.Pattern[str]":
        # Plain substring containment, not word matching ("this" contains "hi")
        return re.compile("|".join(re.escape(t) for t in self.triggers))

    def matches(self, normalized_text: str) -> bool:
        return self.pattern.search(normalized_text) is not None


# ═══════════════════════════════════════════════════════════════════
# GREETINGS
# ═══════════════════════════════════════════════════════════════════

GREETING = Intent(
    name="greeting",
    triggers=(
        "hello", "hi", "hey", "greetings",
        "good morning", "good afternoon", "good evening", "howdy",
    ),
    responses=(
        "Hello there! How can I help you today?",
        "Hi! What can I do for you?",
        "Greetings! How may I assist you?",
        "Hello! I'm ready to help. What do you need?",
        "Hey there! What's on your mind today?",
    ),
)

# ═══════════════════════════════════════════════════════════════════
# FAREWELLS
# ═══════════════════════════════════════════════════════════════════

FAREWELL = Intent(
    name="farewell",
    triggers=("bye", "goodbye", "see you", "farewell", "later", "take care"),
    responses=(
        "Goodbye! Have a great day!",
        "See you later! Feel free to chat again anytime.",
        "Farewell! It was nice chatting with you.",
        "Take care! Come back soon.",
        "Bye for now! I'll be here if you need anything else.",
    ),
)

# Checked in this order: a query matching both is a greeting
INTENTS = (GREETING, FAREWELL)


def detect_intent(normalized_text: str):
    """Return the first Intent whose trigger appears in the text, or None"""
    for intent in INTENTS:
        if intent.matches(normalized_text):
            return intent
    return None
