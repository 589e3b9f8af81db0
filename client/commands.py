"""
Shared Commands Module
Handles ':' commands for the chat CLI
"""

import logging

from client.env_display import format_env_display
from client.metrics import prepare_metrics, record_ingest
from tools.knowledge_base import kb_config
from tools.knowledge_base.kb_json import kb_export_json, kb_import_file
from tools.knowledge_base.kb_web import load_remote_knowledge, train_from_duckduckgo

logger = logging.getLogger("kb_client")


def get_commands_list():
    """Get list of available commands"""
    return [
        ":commands - List all available commands",
        ":stats - Show knowledge base and lookup metrics",
        ":env - Show the current configuration",
        ":teach <answer> - Teach the answer to the last unanswered question",
        ":save - Write the knowledge base to disk",
        ":reload - Reload the knowledge base from disk",
        ":export <file> - Export the knowledge base as JSON",
        ":import <file> - Load training data (JSON, or question|||answer lines)",
        ":web [url] - Load a published knowledge base file",
        ":train <query> - Train from DuckDuckGo search results",
        ":log on|off - Turn conversation logging on or off",
        ":clear history - Clear the conversation",
        ":clear knowledge - Forget every entry (until the next :reload)",
    ]


def format_stats_display(store):
    """Format metrics for CLI display"""
    stats = prepare_metrics()

    lines = []
    lines.append("=" * 60)
    lines.append("KNOWLEDGE BASE METRICS")
    lines.append("=" * 60)
    lines.append("")
    lines.append(f"  Entries:        {len(store)}")
    lines.append(f"  Taught:         {stats['entries_taught']}")
    lines.append(f"  Imported:       {stats['entries_imported']}")
    lines.append("")
    lines.append("QUERIES:")
    lines.append(f"  Total:          {stats['queries']}")
    lines.append(f"  Answered:       {stats['answered']} ({stats['answer_rate']}%)")
    lines.append(f"  Avg Lookup:     {stats['avg_lookup_ms']:.2f}ms")

    if stats["per_source"]:
        lines.append("")
        lines.append("  By Source:")
        for source, count in sorted(stats["per_source"].items(), key=lambda x: x[1], reverse=True):
            lines.append(f"    {source:10s} {count:4d}")

    lines.append("")
    lines.append("=" * 60)
    return "\n".join(lines)


def _save(store):
    try:
        store.save()
    except OSError as e:
        logger.error(f"❌ Failed to save knowledge base: {e}")
        return f"Failed to save knowledge base: {e}"
    return None


async def handle_command(query, session, http_client=None):
    """
    Process a command starting with ':'
    Returns: (handled: bool, response: str or None)
    """
    query = query.strip()
    store = session.store

    if query in (":commands", ":help"):
        return True, "\n".join(get_commands_list())

    if query == ":stats":
        return True, format_stats_display(store)

    if query == ":env":
        return True, format_env_display()

    if query == ":teach" or query.startswith(":teach "):
        parts = query.split(maxsplit=1)
        return True, session.teach(parts[1] if len(parts) > 1 else "")

    if query == ":save":
        error = _save(store)
        return True, error or f"Saved {len(store)} entries to {store.path}"

    if query == ":reload":
        try:
            count = store.load()
        except OSError as e:
            logger.error(f"❌ Failed to reload knowledge base: {e}")
            return True, f"Failed to reload knowledge base: {e}"
        return True, f"Reloaded {count} entries from {store.path}"

    if query.startswith(":export"):
        parts = query.split(maxsplit=1)
        if len(parts) == 1:
            return True, "Usage: :export <file>"
        try:
            result = kb_export_json(store, parts[1])
        except OSError as e:
            logger.error(f"❌ Export failed: {e}")
            return True, f"Unable to write to the selected file: {e}"
        return True, f"Knowledge base exported successfully ({result['count']} entries to {result['path']})"

    if query.startswith(":import"):
        parts = query.split(maxsplit=1)
        if len(parts) == 1:
            return True, "Usage: :import <file>"
        try:
            result = kb_import_file(store, parts[1])
        except OSError as e:
            return True, f"Unable to open the selected file: {e}"
        except ValueError as e:
            return True, f"Error: {e}"
        record_ingest(result["count"])
        if result["format"] == "json":
            return True, f"Loaded {result['count']} entries from JSON."

        # Text training files are written through straight away
        error = _save(store)
        return True, error or f"Loaded {result['count']} entries from text file."

    if query == ":web" or query.startswith(":web "):
        parts = query.split(maxsplit=1)
        url = parts[1] if len(parts) > 1 else kb_config.KB_REMOTE_URL
        if not url:
            return True, "Usage: :web <url> (or set KB_REMOTE_URL)"
        result = await load_remote_knowledge(
            store, url, kb_config.KB_REMOTE_KEY.encode("utf-8"), client=http_client
        )
        if not result["success"]:
            return True, result["error"]
        record_ingest(result["count"])
        error = _save(store)
        return True, error or f"Loaded {result['count']} new entries from the website and updated the knowledge base."

    if query.startswith(":train"):
        parts = query.split(maxsplit=1)
        if len(parts) == 1:
            return True, "Usage: :train <query>"
        result = await train_from_duckduckgo(store, parts[1], client=http_client)
        if not result["success"]:
            return True, result["error"]
        record_ingest(result["count"])
        error = _save(store)
        return True, error or f"Training complete: loaded {result['count']} entries from DuckDuckGo."

    if query.startswith(":log"):
        parts = query.split()
        if len(parts) != 2 or parts[1] not in ("on", "off"):
            return True, "Usage: :log on|off"
        session.logging_enabled = parts[1] == "on"
        return True, f"Conversation logging {'enabled' if session.logging_enabled else 'disabled'}."

    if query.startswith(":clear"):
        parts = query.split()
        if len(parts) == 1:
            return True, "Specify what to clear"

        target = parts[1]
        if target == "history":
            session.clear_history()
            return True, "Conversation cleared."
        if target == "knowledge":
            store.clear()
            return True, "Knowledge base cleared (on disk until the next :save)."
        return True, f"Unknown clear target: {target}"

    return False, None
