"""
Knowledge Base Configuration
Values come from the environment, with .env at the project root loaded first
"""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env", override=True)

# Key the published knowledge_base.dat was written with
DEFAULT_ENCRYPTION_KEY = "k1eFjP@7xL9qZ#5mR2tY8sA3vB6nC0wD"
DEFAULT_REMOTE_URL = (
    "https://raw.githubusercontent.com/NexiaMindAI/NexiaMindAI-CPP/"
    "refs/heads/main/Assets/knowledge_base.dat"
)


def project_path(value: str) -> Path:
    """Relative paths are taken from the project root, not the working directory"""
    path = Path(value).expanduser()
    return path if path.is_absolute() else PROJECT_ROOT / path


# A blank value in .env means "use the default", same as leaving it unset
KB_FILE = project_path(os.getenv("KB_FILE") or "data/knowledge_base.dat")
KB_ENCRYPTION_KEY = os.getenv("KB_ENCRYPTION_KEY") or DEFAULT_ENCRYPTION_KEY
KB_SIMILARITY_THRESHOLD = float(os.getenv("KB_SIMILARITY_THRESHOLD") or 0.8)
KB_SAMPLE_FILE = project_path(os.getenv("KB_SAMPLE_FILE") or "sample.json")
KB_REMOTE_URL = os.getenv("KB_REMOTE_URL", DEFAULT_REMOTE_URL).strip()
KB_REMOTE_KEY = os.getenv("KB_REMOTE_KEY") or DEFAULT_ENCRYPTION_KEY
KB_HTTP_TIMEOUT = float(os.getenv("KB_HTTP_TIMEOUT") or 30)
LOG_DIR = project_path(os.getenv("LOG_DIR") or "logs")
