"""
Knowledge Base Web Loaders
Pull question/answer pairs from the network and hand them to the store:
- a published, encrypted knowledge_base.dat
- the DuckDuckGo Instant Answer API
"""

import logging
from typing import Any, Dict, Optional

import httpx

from tools.knowledge_base.kb_config import KB_HTTP_TIMEOUT
from tools.knowledge_base.kb_store import decode_knowledge

logger = logging.getLogger(__name__)

DUCKDUCKGO_ENDPOINT = "https://api.duckduckgo.com/"


async def _get(url: str, params: Optional[Dict[str, str]] = None,
               client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
    if client is not None:
        response = await client.get(url, params=params)
    else:
        async with httpx.AsyncClient(timeout=KB_HTTP_TIMEOUT, follow_redirects=True) as owned:
            response = await owned.get(url, params=params)

    response.raise_for_status()
    return response


async def load_remote_knowledge(store, url: str, key: bytes,
                                client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """
    Download an encrypted knowledge file and merge its entries into the store.

    Args:
        store: KnowledgeStore to ingest into
        url: Location of the knowledge file
        key: Key the remote file was encrypted with
        client: Optional httpx client (tests inject a mock transport)

    Returns:
        Dict with keys:
            - success (bool)
            - count (int): entries ingested
            - error (str): when success is False
    """
    logger.info(f"🌐 Loading knowledge from {url}")

    try:
        response = await _get(url, client=client)
    except httpx.HTTPError as e:
        logger.error(f"❌ Remote knowledge fetch failed: {e}")
        return {"success": False, "count": 0, "error": f"Error loading data: {e}"}

    data = response.content
    if not data:
        logger.warning("⚠️  Remote knowledge file was empty")
        return {"success": False, "count": 0, "error": "No data received from server"}

    result = decode_knowledge(data, key)
    if not result.entries:
        logger.warning(f"⚠️  No records decoded from {url} - wrong key?")
        return {"success": False, "count": 0,
                "error": "Error processing data: no entries could be decoded (check KB_REMOTE_KEY)"}

    for question, answer in result.entries:
        store.add_entry(question, answer)

    logger.info(f"✅ Loaded {len(result.entries)} entries from {url} ({result.fmt} format)")
    return {"success": True, "count": len(result.entries)}


def parse_duckduckgo(payload: Any) -> list:
    """
    Extract question/answer pairs from an Instant Answer response.

    Heading -> AbstractText when both are present, and each related topic's
    Text as both question and answer.
    """
    if not isinstance(payload, dict):
        raise ValueError("Training data is not in the expected format")

    pairs = []

    heading = payload.get("Heading") or ""
    abstract = payload.get("AbstractText") or ""
    if heading and abstract:
        pairs.append((heading, abstract))

    for topic in payload.get("RelatedTopics") or []:
        if not isinstance(topic, dict):
            continue
        text = topic.get("Text") or ""
        if text:
            pairs.append((text, text))

    return pairs


async def train_from_duckduckgo(store, query: str,
                                client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """
    Search DuckDuckGo and ingest what the Instant Answer API returns.

    Returns:
        Dict with success, count and (on failure) error
    """
    params = {
        "q": query,
        "format": "json",
        "no_redirect": "1",
        "no_html": "1",
    }

    logger.info(f"🔍 Training from DuckDuckGo: '{query[:100]}'")

    try:
        response = await _get(DUCKDUCKGO_ENDPOINT, params=params, client=client)
        pairs = parse_duckduckgo(response.json())
    except httpx.HTTPError as e:
        logger.error(f"❌ DuckDuckGo request failed: {e}")
        return {"success": False, "count": 0, "error": f"Error loading data: {e}"}
    except ValueError as e:
        # JSONDecodeError is a ValueError too
        logger.error(f"❌ DuckDuckGo returned unusable data: {e}")
        return {"success": False, "count": 0, "error": "Training data is not in the expected format."}

    for question, answer in pairs:
        store.add_entry(question, answer)

    logger.info(f"✅ Training complete: {len(pairs)} entries from DuckDuckGo")
    return {"success": True, "count": len(pairs)}
