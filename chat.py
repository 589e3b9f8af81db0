import asyncio
import json
import logging

from client.cli import cli_input_loop
from client.logging_handler import setup_conversation_log, setup_logging
from client.metrics import record_ingest
from client.session import ChatSession
from tools.knowledge_base import kb_config
from tools.knowledge_base.kb_json import kb_import_json
from tools.knowledge_base.kb_store import KnowledgeStore


def load_sample_data(store, logger):
    """Import the sample JSON file if one is configured and present"""
    sample = kb_config.KB_SAMPLE_FILE
    if not sample.exists():
        logger.info(f"📄 No sample data at {sample}")
        return 0

    try:
        count = kb_import_json(store, sample)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"⚠️  Could not load {sample}: {e}")
        return 0

    record_ingest(count)
    if count > 0:
        print(f"Automatically loaded {count} entries from {sample.name}.")
    else:
        print(f"No valid entries found in {sample.name}.")
    return count


async def main():
    setup_logging(kb_config.LOG_DIR, "kb-chat.log", console_level=logging.WARNING)
    setup_conversation_log(kb_config.LOG_DIR)
    logger = logging.getLogger("kb_client")

    # 1️⃣ Knowledge store
    store = KnowledgeStore(
        kb_config.KB_FILE,
        kb_config.KB_ENCRYPTION_KEY,
        threshold=kb_config.KB_SIMILARITY_THRESHOLD,
    )
    load_sample_data(store, logger)

    # 2️⃣ Chat session
    session = ChatSession(store)
    logger.info(f"🚀 Chat started with {len(store)} entries")

    try:
        await cli_input_loop(session, logger)
    finally:
        try:
            store.save()
        except OSError as e:
            logger.error(f"❌ Failed to save knowledge base on exit: {e}")
            print(f"\n❌ Error: could not save knowledge base: {e}\n")
        logger.info("Application closed")


if __name__ == "__main__":
    asyncio.run(main())
