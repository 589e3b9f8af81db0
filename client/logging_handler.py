"""
Logging Module
Root logger setup for the entry points and the conversation transcript log
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_dir: Path, log_name: str, console_level=logging.INFO):
    """
    Send all logging to logs/<log_name> and the console.

    Returns:
        The root logger
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Remove any existing handlers (in case something already configured it)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(log_dir / log_name, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return root_logger


def setup_conversation_log(log_dir: Path):
    """Write the chat transcript to logs/conversation.log, outside the root log"""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    conversation_logger = logging.getLogger("kb_conversation")
    conversation_logger.setLevel(logging.INFO)
    conversation_logger.propagate = False
    conversation_logger.handlers.clear()

    handler = logging.FileHandler(log_dir / "conversation.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", "%Y-%m-%d %H:%M:%S"))
    conversation_logger.addHandler(handler)

    return conversation_logger
