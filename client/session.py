"""
Chat Session
Ties the resolver, the teach flow and the conversation transcript together
for one interactive user (CLI or MCP caller)
"""

import logging
import time
from typing import Dict, List, Optional

from client.metrics import record_ingest, record_query
from client.responder import ResponseResolver

logger = logging.getLogger("kb_client")
conversation_logger = logging.getLogger("kb_conversation")

UNKNOWN_REPLY = (
    "I don't know the answer to that question.\n"
    "Would you like to teach me? Type :teach <answer>"
)
MOVE_ON_REPLY = "Alright, let's move on."


class ChatSession:
    def __init__(self, store, resolver: Optional[ResponseResolver] = None):
        self.store = store
        self.resolver = resolver or ResponseResolver(store)
        self.pending_question: Optional[str] = None
        self.history: List[Dict[str, str]] = []
        self.logging_enabled = True

    def ask(self, text: str) -> str:
        """Answer a user message; unanswered messages become the pending question"""
        text = text.strip()
        self._remember("user", text)

        start = time.perf_counter()
        resolution = self.resolver.resolve(text)
        record_query(resolution.source, time.perf_counter() - start)

        if not resolution.answered:
            self.pending_question = text
            return UNKNOWN_REPLY

        self.pending_question = None
        self._remember("bot", resolution.text)
        return resolution.text

    def teach(self, answer: str) -> str:
        """Store an answer for the last question the bot could not answer"""
        if self.pending_question is None:
            return "There is no unanswered question to teach right now."

        answer = answer.strip()
        if not answer:
            self.pending_question = None
            return MOVE_ON_REPLY

        question = self.pending_question
        self.store.add_entry(question, answer)
        self.pending_question = None
        record_ingest(1, taught=True)
        logger.info(f"🧠 New knowledge added: Q: {question}")

        self._remember("bot", answer)
        return f"Thank you for teaching me!\n{answer}"

    def clear_history(self):
        self.history = []
        self.pending_question = None

    def _remember(self, role: str, text: str):
        self.history.append({"role": role, "text": text})
        if self.logging_enabled:
            conversation_logger.info(f"{role.capitalize()}: {text}")
