"""
Knowledge Base MCP Server
Runs over stdio transport
"""
import sys
from pathlib import Path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import json
import logging
import threading

from mcp.server.fastmcp import FastMCP

from client.logging_handler import setup_logging
from client.responder import ResponseResolver
from tools.knowledge_base import kb_config
from tools.knowledge_base.kb_json import kb_export_json, kb_import_file
from tools.knowledge_base.kb_store import KnowledgeStore
from tools.knowledge_base.kb_web import load_remote_knowledge, train_from_duckduckgo

logger = logging.getLogger("mcp_kb_server")

mcp = FastMCP("kb-server")

# Created on first use
_store = None
_resolver = None
_init_lock = threading.Lock()


def get_store() -> KnowledgeStore:
    """Get or create the server's knowledge store"""
    global _store
    with _init_lock:
        if _store is None:
            _store = KnowledgeStore(
                kb_config.KB_FILE,
                kb_config.KB_ENCRYPTION_KEY,
                threshold=kb_config.KB_SIMILARITY_THRESHOLD,
            )
        return _store


def get_resolver() -> ResponseResolver:
    global _resolver
    store = get_store()
    with _init_lock:
        if _resolver is None:
            _resolver = ResponseResolver(store)
        return _resolver


def _error(message: str) -> str:
    return json.dumps({"success": False, "error": message})


@mcp.tool()
def ingest_entry(question: str, answer: str) -> str:
    """
    Teach the knowledge base an answer to a question.

    A question that normalizes to an existing one (case and punctuation are
    ignored) replaces the earlier answer.

    Args:
        question (str, required): The question text
        answer (str, required): The answer to return for it

    Returns:
        JSON string with the normalized question and the entry count
    """
    logger.info(f"🛠 [server] ingest_entry called with question: {question}")
    store = get_store()
    key = store.add_entry(question, answer)
    return json.dumps({"success": True, "question": key, "entries": len(store)})


@mcp.tool()
def query_knowledge(query: str) -> str:
    """
    Answer a chat message from the knowledge base.

    Greetings and farewells get a canned reply. Otherwise the exact question
    is looked up, then the closest stored question (token overlap above the
    similarity threshold).

    Args:
        query (str, required): The user's message

    Returns:
        JSON string with:
        - answer: The answer text ("" when nothing matched)
        - source: greeting / farewell / exact / fuzzy / none
    """
    logger.info(f"🛠 [server] query_knowledge called with query: {query}")
    resolution = get_resolver().resolve(query)
    return json.dumps({"answer": resolution.text, "source": resolution.source})


@mcp.tool()
def export_entries() -> str:
    """
    List every question/answer pair in the knowledge base.

    Returns:
        JSON string with an array of {"question", "answer"} objects
    """
    logger.info("🛠 [server] export_entries called")
    entries = [
        {"question": question, "answer": answer}
        for question, answer in get_store().get_all_entries()
    ]
    return json.dumps(entries, indent=2)


@mcp.tool()
def persist_knowledge() -> str:
    """Write the knowledge base to its encrypted file. Returns JSON string."""
    logger.info("🛠 [server] persist_knowledge called")
    store = get_store()
    try:
        store.save()
    except OSError as e:
        logger.error(f"❌ Save failed: {e}")
        return _error(f"Failed to save knowledge base: {e}")
    return json.dumps({"success": True, "entries": len(store), "path": str(store.path)})


@mcp.tool()
def reload_knowledge() -> str:
    """
    Reload the knowledge base from its file, discarding unsaved changes.
    Returns JSON string with the number of entries loaded.
    """
    logger.info("🛠 [server] reload_knowledge called")
    try:
        count = get_store().load()
    except OSError as e:
        logger.error(f"❌ Reload failed: {e}")
        return _error(f"Failed to reload knowledge base: {e}")
    return json.dumps({"success": True, "entries": count})


@mcp.tool()
def clear_knowledge() -> str:
    """
    Forget every entry in memory. The file is unchanged until persist_knowledge.
    Returns JSON string.
    """
    logger.info("🛠 [server] clear_knowledge called")
    get_store().clear()
    return json.dumps({"success": True, "entries": 0})


@mcp.tool()
def import_json_file(path: str) -> str:
    """
    Load training data from a file.

    The file is read as a JSON array first. When that gives nothing, each
    question|||answer line is imported instead and the knowledge base is saved.

    Args:
        path (str, required): File containing [{"question": ..., "answer": ...}, ...]
            or question|||answer lines

    Returns:
        JSON string with the number of entries imported and the format used
    """
    logger.info(f"🛠 [server] import_json_file called with path: {path}")
    try:
        result = kb_import_file(get_store(), path)
    except OSError as e:
        return _error(f"Unable to open the selected file: {e}")
    except ValueError as e:
        return _error(str(e))

    result = {"success": True, **result}
    if result["format"] == "text":
        return _persist_after_import(result)
    return json.dumps(result)


@mcp.tool()
def export_json_file(path: str) -> str:
    """
    Export the knowledge base to a JSON file (".json" is appended if missing).
    Returns JSON string with the written path and entry count.
    """
    logger.info(f"🛠 [server] export_json_file called with path: {path}")
    try:
        result = kb_export_json(get_store(), path)
    except OSError as e:
        return _error(f"Unable to write to the selected file: {e}")
    return json.dumps({"success": True, **result})


def _persist_after_import(result: dict) -> str:
    if result["success"]:
        try:
            get_store().save()
        except OSError as e:
            logger.error(f"❌ Save after import failed: {e}")
            result = {**result, "success": False, "error": f"Failed to save knowledge base: {e}"}
    return json.dumps(result)


@mcp.tool()
async def load_remote_knowledge_file(url: str | None = None) -> str:
    """
    Download a published encrypted knowledge base file and merge it in.

    Args:
        url (str, optional): File location, defaults to KB_REMOTE_URL

    Returns:
        JSON string with success, count and error (on failure)
    """
    url = url or kb_config.KB_REMOTE_URL
    logger.info(f"🛠 [server] load_remote_knowledge_file called with url: {url}")
    if not url:
        return _error("No URL given and KB_REMOTE_URL is not set")

    result = await load_remote_knowledge(
        get_store(), url, kb_config.KB_REMOTE_KEY.encode("utf-8")
    )
    return _persist_after_import(result)


@mcp.tool()
async def train_from_web(query: str) -> str:
    """
    Train the knowledge base from DuckDuckGo Instant Answer results.

    Args:
        query (str, required): Search query

    Returns:
        JSON string with success, count and error (on failure)
    """
    logger.info(f"🛠 [server] train_from_web called with query: {query}")
    result = await train_from_duckduckgo(get_store(), query)
    return _persist_after_import(result)


if __name__ == "__main__":
    setup_logging(kb_config.LOG_DIR, "mcp_kb_server.log")
    logging.getLogger("mcp").setLevel(logging.DEBUG)
    logger.info("🚀 Server logging initialized - writing to logs/mcp_kb_server.log")

    try:
        mcp.run(transport="stdio")
    finally:
        if _store is not None:
            try:
                _store.save()
            except OSError as e:
                logger.error(f"❌ Failed to save knowledge base on shutdown: {e}")
