"""
Telegram bot for Jotter.

Mobile surface: list, add, edit, toggle and delete notes from your phone.
"""

import logging
import os
from typing import Any

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from jotter.config import configure_logging, ensure_dirs, load_config
from jotter.formatting import DONE_MARKER, preview, split_note_text
from jotter.models import Note
from jotter.store import NotesStore, open_store

logger = logging.getLogger(__name__)

# Separates title from content in /add and /edit
FIELD_SEPARATOR = "|"

HELP_TEXT = (
    "Jotter Commands:\n\n"
    "/list - List notes\n"
    "/show <ref> - Show a note\n"
    "/add <title> | <content> - Add a note\n"
    "/edit <ref> <title> | <content> - Edit a note\n"
    "/toggle <ref> - Toggle completion (also /done)\n"
    "/delete <ref> [<ref>...] - Delete notes\n"
    "/id - Show your user ID\n"
    "/help - Show this message\n\n"
    "<ref> is the number shown by /list.\n"
    "Send any text to add it as a note (first line is the title)."
)


def get_bot_config() -> dict[str, Any]:
    """Get bot configuration."""
    config = load_config()
    bot_config = config.get("telegram", {})

    # Token from config or environment
    token = bot_config.get("token") or os.environ.get("JOTTER_TELEGRAM_TOKEN")
    if not token:
        raise ValueError(
            "Telegram bot token not found. "
            "Set JOTTER_TELEGRAM_TOKEN env var or add to config.toml"
        )

    # Authorized user IDs (comma-separated in env, list in config)
    authorized = bot_config.get("authorized_users", [])
    if not authorized:
        env_users = os.environ.get("JOTTER_TELEGRAM_USERS", "")
        if env_users:
            authorized = [int(uid.strip()) for uid in env_users.split(",") if uid.strip()]

    return {
        "token": token,
        "authorized_users": set(authorized),
    }


def is_authorized(user_id: int, authorized_users: set[int]) -> bool:
    """Check if user is authorized."""
    # If no users configured, deny all (secure default)
    if not authorized_users:
        return False
    return user_id in authorized_users


def format_notes_telegram(notes: list[Note], title: str = "NOTES", limit: int = 20) -> str:
    """Format notes for Telegram (plain text, compact)."""
    if not notes:
        return f"{title}\n\nNo notes yet."

    lines = [f"{title}", ""]

    for position, note in enumerate(notes[:limit], 1):
        marker = f"{DONE_MARKER} " if note.is_completed else ""
        note_title = (note.title or "(untitled)")[:40]
        extra = f" - {preview(note.content, 30)}" if note.content else ""
        lines.append(f"#{position} {marker}{note_title}{extra}")

    if len(notes) > limit:
        lines.append(f"\n... and {len(notes) - limit} more")

    return "\n".join(lines)


def format_note_telegram(note: Note, position: int) -> str:
    """Format a single note for Telegram."""
    status = "Completed" if note.is_completed else "Not completed"
    lines = [f"#{position} {note.title or '(untitled)'}", f"[{status}]", ""]
    if note.content:
        lines.append(note.content)
    return "\n".join(lines).rstrip()


def parse_edit_args(args: list[str]) -> tuple[str, str, str]:
    """Split /edit arguments into (ref, title, content)."""
    if len(args) < 2:
        raise ValueError("Usage: /edit <ref> <title> | <content>")
    title, content = split_note_text(" ".join(args[1:]), FIELD_SEPARATOR)
    return args[0], title, content


async def _check_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """Reply and return False if the sender is not authorized."""
    if not update.effective_user or not update.message:
        return False

    user_id = update.effective_user.id
    authorized_users = context.bot_data.get("authorized_users", set())

    # Security: only process messages from authorized users
    if not is_authorized(user_id, authorized_users):
        logger.warning("Unauthorized message attempt from user %s", user_id)
        await update.message.reply_text(f"Unauthorized. Your ID: {user_id}")
        return False
    return True


def _store(context: ContextTypes.DEFAULT_TYPE) -> NotesStore:
    return context.bot_data["store"]


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.effective_user or not update.message:
        return

    user_id = update.effective_user.id
    authorized_users = context.bot_data.get("authorized_users", set())

    if is_authorized(user_id, authorized_users):
        await update.message.reply_text("Jotter bot ready.\n\n" + HELP_TEXT)
    else:
        await update.message.reply_text(
            f"Unauthorized. Your user ID: {user_id}\n"
            "Add this ID to JOTTER_TELEGRAM_USERS to authorize."
        )


async def id_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /id command - show user's Telegram ID."""
    if not update.effective_user or not update.message:
        return

    user_id = update.effective_user.id
    await update.message.reply_text(f"Your Telegram user ID: {user_id}")


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.effective_user or not update.message:
        return

    await update.message.reply_text(HELP_TEXT)


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list command."""
    if not await _check_user(update, context):
        return

    await update.message.reply_text(format_notes_telegram(_store(context).notes))


async def show_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /show command."""
    if not await _check_user(update, context):
        return

    if not context.args:
        await update.message.reply_text("Usage: /show <ref>")
        return

    try:
        store = _store(context)
        position = store.resolve(context.args[0])
        await update.message.reply_text(
            format_note_telegram(store.notes[position], position + 1)
        )
    except ValueError as e:
        await update.message.reply_text(str(e))


async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add command."""
    if not await _check_user(update, context):
        return

    if not context.args:
        await update.message.reply_text("Usage: /add <title> | <content>")
        return

    title, content = split_note_text(" ".join(context.args), FIELD_SEPARATOR)
    await _add_note(update, context, title, content)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages - add as a note."""
    if not await _check_user(update, context):
        return

    text = update.message.text
    if not text:
        await update.message.reply_text("Only text messages are supported.")
        return

    title, content = split_note_text(text)
    await _add_note(update, context, title, content)


async def _add_note(
    update: Update, context: ContextTypes.DEFAULT_TYPE, title: str, content: str
) -> None:
    try:
        store = _store(context)
        note = store.add(title, content)
        await update.message.reply_text(f"Added #{len(store)}: {note.title}")
        logger.info("Added note from Telegram user %s: %s", update.effective_user.id, note.id)
    except Exception as e:
        logger.error("Failed to add note: %s", e)
        await update.message.reply_text(f"Error adding note: {e}")


async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /edit command."""
    if not await _check_user(update, context):
        return

    try:
        ref, title, content = parse_edit_args(context.args or [])
        store = _store(context)
        position = store.resolve(ref)
        note = store.notes[position]
        if store.update(note.id, title, content):
            await update.message.reply_text(f"Updated #{position + 1}: {note.title}")
        else:
            await update.message.reply_text(f"Not found: {ref}")
    except ValueError as e:
        await update.message.reply_text(str(e))


async def toggle_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /toggle (and /done) command."""
    if not await _check_user(update, context):
        return

    if not context.args:
        await update.message.reply_text("Usage: /toggle <ref>")
        return

    ref = context.args[0]

    try:
        store = _store(context)
        note = store.notes[store.resolve(ref)]
        if store.toggle_completion(note.id):
            state = "Completed" if note.is_completed else "Reopened"
            await update.message.reply_text(f"{state}: {note.title}")
        else:
            await update.message.reply_text(f"Not found: {ref}")
    except ValueError as e:
        await update.message.reply_text(str(e))


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delete command."""
    if not await _check_user(update, context):
        return

    if not context.args:
        await update.message.reply_text("Usage: /delete <ref> [<ref>...]")
        return

    try:
        store = _store(context)
        positions = {store.resolve(ref) for ref in context.args}
        store.delete(positions)
        await update.message.reply_text(f"Deleted {len(positions)} note(s)")
    except (ValueError, IndexError) as e:
        await update.message.reply_text(str(e))


def build_application(config: dict[str, Any], store: NotesStore) -> Application:
    """Create the bot application with all handlers registered."""
    app = Application.builder().token(config["token"]).build()

    # Shared state for handlers
    app.bot_data["authorized_users"] = config["authorized_users"]
    app.bot_data["store"] = store

    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("id", id_command))
    app.add_handler(CommandHandler("list", list_command))
    app.add_handler(CommandHandler("show", show_command))
    app.add_handler(CommandHandler("add", add_command))
    app.add_handler(CommandHandler("edit", edit_command))
    app.add_handler(CommandHandler(["toggle", "done"], toggle_command))
    app.add_handler(CommandHandler("delete", delete_command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    return app


def run_bot() -> None:
    """Run the Telegram bot."""
    configure_logging("INFO")
    config = get_bot_config()

    ensure_dirs()
    store = open_store()
    app = build_application(config, store)

    if config["authorized_users"]:
        logger.info("Bot starting. Authorized users: %s", config["authorized_users"])
    else:
        logger.warning("No authorized users configured! Bot will deny all messages.")

    app.run_polling(allowed_updates=Update.ALL_TYPES)


def main() -> int:
    """Entry point for CLI."""
    try:
        run_bot()
        return 0
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nBot stopped.")
        return 0


if __name__ == "__main__":
    import sys
    sys.exit(main())
