"""
Environment Variable Display Utility
"""
from typing import Dict, Any

from tools.knowledge_base import kb_config


def get_env_display() -> Dict[str, Any]:
    """
    Get current knowledge base configuration for display.
    Masks the encryption key.

    Returns:
        Dictionary with categorized settings
    """

    def mask_token(value: str) -> str:
        """Mask token but handle empty/None"""
        if not value:
            return "(not set)"
        return "*" * len(value)

    return {
        "store": {
            "KB_FILE": str(kb_config.KB_FILE),
            "KB_ENCRYPTION_KEY": mask_token(kb_config.KB_ENCRYPTION_KEY),
            "KB_SIMILARITY_THRESHOLD": kb_config.KB_SIMILARITY_THRESHOLD,
        },
        "import": {
            "KB_SAMPLE_FILE": str(kb_config.KB_SAMPLE_FILE),
            "KB_REMOTE_URL": kb_config.KB_REMOTE_URL or "(not set)",
            "KB_REMOTE_KEY": mask_token(kb_config.KB_REMOTE_KEY),
            "KB_HTTP_TIMEOUT": kb_config.KB_HTTP_TIMEOUT,
        },
        "logging": {
            "LOG_DIR": str(kb_config.LOG_DIR),
        },
    }


def format_env_display() -> str:
    env_vars = get_env_display()

    output = []
    output.append("📋 KNOWLEDGE BASE CONFIGURATION")
    output.append("=" * 50)

    output.append("\n🔐 Store:")
    for name, value in env_vars["store"].items():
        output.append(f"   {name}: {value}")

    output.append("\n🌐 Import:")
    for name, value in env_vars["import"].items():
        output.append(f"   {name}: {value}")

    output.append("\n📝 Logging:")
    output.append(f"   LOG_DIR: {env_vars['logging']['LOG_DIR']}")

    output.append("\n" + "=" * 50)
    return "\n".join(output)
