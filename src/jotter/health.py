"""
Health check module for Jotter.

Reports system status across all components.
"""

import os

from jotter.config import get_db_path, load_config
from jotter.normalizer import DEFAULT_LANGUAGE


def check_storage() -> tuple[str, str]:
    """Check preference database status."""
    db_path = get_db_path()
    if not db_path.exists():
        return "!", "Not created yet"

    try:
        from jotter.preferences import Preferences
        stats = Preferences(db_path).get_stats()
        return "✓", f"OK ({stats['total_keys']} keys, {stats['total_bytes']} bytes)"
    except Exception as e:
        return "✗", f"Error: {e}"


def check_notes() -> tuple[str, str]:
    """Check that saved notes decode."""
    db_path = get_db_path()
    if not db_path.exists():
        return "-", "No saved notes"

    try:
        from pydantic import ValidationError

        from jotter.models import load_notes
        from jotter.preferences import Preferences

        key = load_config().get("store", {}).get("key", "SavedNotes")
        blob = Preferences(db_path).get(key)
        if blob is None:
            return "-", "No saved notes"
        try:
            notes = load_notes(blob)
        except ValidationError as e:
            return "✗", f"Unreadable ({e.error_count()} errors)"
        return "✓", f"OK ({len(notes)} notes)"
    except Exception as e:
        return "✗", f"Error: {e}"


def check_normalizer() -> tuple[str, str]:
    """Check the lemmatizer can run."""
    language = load_config().get("normalizer", {}).get("language", DEFAULT_LANGUAGE)

    try:
        from jotter.normalizer import TextNormalizer
        TextNormalizer(language=language)("notes")
        return "✓", f"OK (simplemma, {language})"
    except Exception as e:
        return "✗", f"Error: {e}"


def check_telegram() -> tuple[str, str]:
    """Check Telegram bot status."""
    config = load_config()
    tg_config = config.get("telegram", {})

    token = tg_config.get("token") or os.environ.get("JOTTER_TELEGRAM_TOKEN")
    if not token:
        return "-", "Not configured"

    users = tg_config.get("authorized_users", [])
    if not users:
        env_users = os.environ.get("JOTTER_TELEGRAM_USERS", "")
        if env_users:
            users = [u.strip() for u in env_users.split(",") if u.strip()]

    if not users:
        return "!", "No authorized users"

    return "✓", f"OK ({len(users)} users)"


def run_health_check() -> dict[str, tuple[str, str]]:
    """Run all health checks."""
    return {
        "Storage": check_storage(),
        "Notes": check_notes(),
        "Normalizer": check_normalizer(),
        "Telegram": check_telegram(),
    }


def format_health_report(checks: dict[str, tuple[str, str]]) -> str:
    """Format health check results."""
    lines = ["Jotter Health Check", "-" * 40]

    for name, (status, message) in checks.items():
        lines.append(f"{status} {name}: {message}")

    return "\n".join(lines)
