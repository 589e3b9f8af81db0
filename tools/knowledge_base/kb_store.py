"""
Knowledge Base Store
Encrypted question/answer store with exact and fuzzy lookup

On-disk record format (after decryption):
    question|||answer\n
    question|||answer\n

Only the first "|||" on a line is the delimiter, so answers may contain it.
Lines without a delimiter are skipped.
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from tools.knowledge_base import cipher
from tools.knowledge_base.text_processor import normalize, similarity

logger = logging.getLogger(__name__)

SEPARATOR = "|||"
SIMILARITY_THRESHOLD = 0.8

# Anything below 0x20 except tab, newline and carriage return, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


@dataclass
class Match:
    """A resolved lookup: the stored key that matched and how well"""
    question: str
    answer: str
    score: float
    exact: bool


@dataclass
class DecodeResult:
    """
    Outcome of one decode attempt.

    malformed=True means the bytes did not parse as this format and the
    next format should be tried. It never leaves this module's load path.
    """
    fmt: str
    entries: List[Tuple[str, str]] = field(default_factory=list)
    malformed: bool = False


def serialize_records(entries: Iterable[Tuple[str, str]]) -> str:
    return "".join(f"{question}{SEPARATOR}{answer}\n" for question, answer in entries)


def parse_records(text: str) -> List[Tuple[str, str]]:
    """Parse record lines best-effort, splitting each on the first separator"""
    records = []
    for line in text.split("\n"):
        if not line:
            continue
        question, sep, answer = line.partition(SEPARATOR)
        if not sep:
            continue
        records.append((question, answer))
    return records


def decode_nonce_format(raw: bytes, key: bytes) -> DecodeResult:
    body = cipher.decrypt(raw, key)
    if not body:
        return DecodeResult("nonce", malformed=True)

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return DecodeResult("nonce", malformed=True)

    # Decoding with the wrong format still yields ASCII when key and data are
    # ASCII, but it is full of control bytes that record text never has
    if _CONTROL_CHARS.search(text):
        return DecodeResult("nonce", malformed=True)

    entries = parse_records(text)
    return DecodeResult("nonce", entries, malformed=not entries)


def decode_legacy_format(raw: bytes, key: bytes) -> DecodeResult:
    text = cipher.legacy_decrypt(raw, key).decode("utf-8", errors="replace")
    return DecodeResult("legacy", parse_records(text))


# Tried in order; the first result that is not malformed wins
DECODERS = (decode_nonce_format, decode_legacy_format)


def decode_knowledge(raw: bytes, key: bytes) -> DecodeResult:
    """
    Decode knowledge file bytes, falling back to the legacy format.

    Args:
        raw: File contents
        key: Cipher key

    Returns:
        DecodeResult of the format that parsed (legacy result is best-effort)
    """
    if not raw:
        return DecodeResult("empty")

    result = DecodeResult("none", malformed=True)
    for decoder in DECODERS:
        result = decoder(raw, key)
        if not result.malformed:
            break
        logger.info(f"🔐 Knowledge file is not in {result.fmt} format, trying next decoder")

    return result


class KnowledgeStore:
    """
    Question/answer mapping persisted to a single encrypted file.

    All reads and writes of the mapping go through one lock, so the store
    can be shared between the CLI loop and worker threads.
    """

    def __init__(self, path: Union[str, Path], key: Union[str, bytes],
                 threshold: float = SIMILARITY_THRESHOLD, autoload: bool = True):
        self.path = Path(path)
        self.threshold = threshold
        self._key = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        self._entries: Dict[str, str] = {}
        self._lock = threading.RLock()

        if not self._key:
            logger.warning("⚠️  Knowledge base key is empty - the file can not be read and save() will not write it")

        if autoload:
            self.load()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def load(self) -> int:
        """
        Replace the mapping with the contents of the knowledge file.

        A missing file gives an empty mapping. Format problems never raise:
        the nonce format is tried first, then the legacy one. OSError from
        reading an existing file propagates.

        Returns:
            Number of entries loaded
        """
        if not self.path.exists():
            logger.info(f"📂 No knowledge base at {self.path}, starting empty")
            with self._lock:
                self._entries = {}
            return 0

        raw = self.path.read_bytes()
        result = decode_knowledge(raw, self._key)

        entries = {}
        for question, answer in result.entries:
            entries[normalize(question)] = answer

        with self._lock:
            self._entries = entries

        logger.info(f"📂 Loaded {len(entries)} entries from {self.path} ({result.fmt} format)")
        return len(entries)

    def save(self) -> None:
        """
        Encrypt every entry and overwrite the knowledge file.

        With an empty key nothing can be encrypted, so the file is left as it
        is and a warning is logged.

        Raises:
            OSError: the file or its directory could not be written
        """
        if not self._key:
            logger.warning(f"⚠️  Knowledge base key is empty - {self.path} was not written")
            return

        with self._lock:
            payload = serialize_records(self._entries.items())
            count = len(self._entries)

            data = cipher.encrypt(payload.encode("utf-8"), self._key)

            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(self.path)

        logger.info(f"💾 Saved {count} entries to {self.path}")

    def add_entry(self, question: str, answer: str) -> str:
        """Upsert an entry; returns the normalized question used as key"""
        key = normalize(question)
        with self._lock:
            self._entries[key] = answer
        return key

    def lookup(self, question: str) -> Optional[Match]:
        """
        Resolve a question to its best entry.

        Exact normalized match first. Otherwise every entry is scored and the
        highest score strictly above the threshold wins (first one on ties).
        """
        probe = normalize(question)

        with self._lock:
            answer = self._entries.get(probe)
            if answer is not None:
                return Match(probe, answer, 1.0, exact=True)

            best = None
            for stored, stored_answer in self._entries.items():
                score = similarity(probe, stored)
                if score > self.threshold and (best is None or score > best.score):
                    best = Match(stored, stored_answer, score, exact=False)

        return best

    def find_answer(self, question: str) -> str:
        """Answer for a question, or "" when nothing matches"""
        match = self.lookup(question)
        return match.answer if match else ""

    def get_all_entries(self) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._entries.items())

    def clear(self) -> None:
        """Empty the mapping. The file keeps its content until the next save()."""
        with self._lock:
            self._entries.clear()
