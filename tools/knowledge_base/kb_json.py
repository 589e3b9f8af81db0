"""
Knowledge Base JSON import/export

JSON layout (both directions):
    [
      {"question": "...", "answer": "..."},
      ...
    ]

Training files may also be plain text, one question|||answer per line.
"""

import json
import logging
from pathlib import Path

from tools.knowledge_base.kb_store import SEPARATOR

logger = logging.getLogger(__name__)


def kb_export_json(store, path):
    """
    Write every entry of the store to a JSON file.

    A ".json" suffix is appended when missing.

    Returns:
        Dict with the written path and entry count
    """
    path = Path(path)
    if path.suffix != ".json":
        path = path.with_name(path.name + ".json")

    entries = [
        {"question": question, "answer": answer}
        for question, answer in store.get_all_entries()
    ]

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(entries, f, indent=4, ensure_ascii=False)

    logger.info(f"📤 Exported {len(entries)} entries to {path}")
    return {"path": str(path), "count": len(entries)}


def kb_import_entries(store, payload):
    """
    Ingest question/answer objects from decoded JSON.

    Objects missing either field, with a non-string value, or with a blank
    value after trimming are skipped.

    Returns:
        Number of entries ingested

    Raises:
        ValueError: payload is not a JSON array
    """
    if not isinstance(payload, list):
        raise ValueError("JSON is not in the expected array format")

    count = 0
    for item in payload:
        if not isinstance(item, dict):
            continue

        question = item.get("question")
        answer = item.get("answer")
        if not isinstance(question, str) or not isinstance(answer, str):
            continue

        question = question.strip()
        answer = answer.strip()
        if not question or not answer:
            continue

        store.add_entry(question, answer)
        count += 1

    return count


def kb_import_json(store, path):
    """
    Load a JSON training file into the store.

    Raises:
        OSError: file unreadable
        json.JSONDecodeError: not valid JSON
        ValueError: not a JSON array
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    count = kb_import_entries(store, payload)
    logger.info(f"📥 Imported {count} entries from {path}")
    return count


def kb_import_text(store, text):
    """
    Ingest plain-text training lines of the form question|||answer.

    Only lines with exactly one separator are used.

    Returns:
        Number of entries ingested
    """
    count = 0
    for line in text.split("\n"):
        parts = line.rstrip("\r").split(SEPARATOR)
        if len(parts) != 2:
            continue
        store.add_entry(parts[0], parts[1])
        count += 1
    return count


def kb_import_file(store, path):
    """
    Load a training file that is either a JSON array or question|||answer lines.

    JSON is tried first. When it does not parse, or gives no entries, the
    file is read again as text lines.

    Returns:
        Dict with "format" ("json" or "text") and "count"

    Raises:
        OSError: file unreadable
        ValueError: the JSON error, when the text lines gave nothing either
    """
    text = Path(path).read_bytes().decode("utf-8", errors="replace")

    json_error = None
    try:
        count = kb_import_entries(store, json.loads(text))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        json_error, count = e, 0

    if count:
        logger.info(f"📥 Imported {count} JSON entries from {path}")
        return {"format": "json", "count": count}

    count = kb_import_text(store, text)
    if not count and json_error is not None:
        raise json_error

    logger.info(f"📥 Imported {count} text entries from {path}")
    return {"format": "text", "count": count}
