"""
CLI for Jotter.

Minimal CLI using stdlib for fast startup.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    jotter add "Milk" "Buy milk"    # Add a note
    jotter list                     # List notes
    jotter --help                   # Show help
"""

import sys


def print_help() -> None:
    """Print help message."""
    print("""jotter - local-first notes

Commands:
    jotter add <title> [content...]     Add a note (--content TEXT also works)
    jotter list                         List notes
    jotter show <ref>                   Show one note
    jotter edit <ref> <title> [content] Replace title and content (normalized)
    jotter toggle <ref>                 Toggle completion (alias: done)
    jotter delete <ref> [<ref>...]      Delete notes (alias: rm)
    jotter normalize <text...>          Show the normalized form of text
    jotter stats                        Show storage statistics
    jotter health                       Run health checks

Options:
    jotter --help, -h                   Show this help
    jotter --version, -v                Show version

References:
    <ref> is a list position (3 or #3), a note ID, or an ID prefix.

Examples:
    jotter add Milk "Buy milk"
    jotter toggle 1
    jotter edit 1 "Milk 2" "Buy milk and eggs"
    echo "Title\\nBody" | jotter""")


def print_version() -> None:
    """Print version."""
    from jotter import __version__
    print(f"jotter {__version__}")


def _open_store():
    from jotter.config import configure_logging, ensure_dirs
    from jotter.store import open_store

    configure_logging()
    ensure_dirs()
    return open_store()


def cmd_add(args: list[str]) -> int:
    """Add a note. Prints the new note's ID."""
    content_parts: list[str] = []
    positional: list[str] = []

    # Parse arguments
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--content", "-c") and i + 1 < len(args):
            content_parts.append(args[i + 1])
            i += 2
        else:
            positional.append(arg)
            i += 1

    if not positional:
        print("Usage: jotter add <title> [content...]", file=sys.stderr)
        return 1

    title = positional[0]
    content = " ".join(positional[1:] + content_parts)

    try:
        store = _open_store()
        note = store.add(title, content)
        print(note.id)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_list() -> int:
    """List notes."""
    from jotter.formatting import format_notes_list

    try:
        store = _open_store()
        print(format_notes_list(store.notes))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: list[str]) -> int:
    """Show a single note."""
    from jotter.formatting import format_note_detail

    if not args:
        print("Usage: jotter show <ref>", file=sys.stderr)
        return 1

    try:
        store = _open_store()
        position = store.resolve(args[0])
        print(format_note_detail(store.notes[position], position + 1))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_edit(args: list[str]) -> int:
    """Replace a note's title and content."""
    if len(args) < 2:
        print("Usage: jotter edit <ref> <title> [content...]", file=sys.stderr)
        return 1

    ref, title = args[0], args[1]
    content = " ".join(args[2:])

    try:
        store = _open_store()
        note = store.notes[store.resolve(ref)]
        if store.update(note.id, title, content):
            updated = store.get(note.id)
            print(f"Updated: {updated.title}")
            return 0
        print(f"Not found: {ref}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_toggle(args: list[str]) -> int:
    """Toggle a note's completion flag."""
    if not args:
        print("Usage: jotter toggle <ref>", file=sys.stderr)
        return 1

    ref = args[0]

    try:
        store = _open_store()
        note = store.notes[store.resolve(ref)]
        if store.toggle_completion(note.id):
            state = "Completed" if note.is_completed else "Reopened"
            print(f"{state}: {note.title}")
            return 0
        print(f"Not found: {ref}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_delete(args: list[str]) -> int:
    """Delete one or more notes in a single batch."""
    if not args:
        print("Usage: jotter delete <ref> [<ref>...]", file=sys.stderr)
        return 1

    try:
        store = _open_store()
        positions = {store.resolve(ref) for ref in args}
        store.delete(positions)
        print(f"Deleted {len(positions)} note(s)")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_normalize(args: list[str]) -> int:
    """Print the normalized form of text."""
    from jotter.config import load_config
    from jotter.normalizer import DEFAULT_LANGUAGE, TextNormalizer

    text = " ".join(args)

    try:
        language = load_config().get("normalizer", {}).get("language", DEFAULT_LANGUAGE)
        print(TextNormalizer(language=language)(text))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_stats() -> int:
    """Show storage statistics."""
    try:
        store = _open_store()
        stats = store.preferences.get_stats()
        completed = sum(1 for note in store.notes if note.is_completed)

        print("Jotter Statistics")
        print("-" * 30)
        print(f"Notes: {len(store)}")
        print(f"  completed: {completed}")
        print(f"  open: {len(store) - completed}")
        print(f"\nStorage: {stats['path']}")
        print(f"  keys: {stats['total_keys']}")
        print(f"  bytes: {stats['total_bytes']}")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_health() -> int:
    """Run health checks."""
    from jotter.health import format_health_report, run_health_check

    checks = run_health_check()
    print(format_health_report(checks))
    return 0 if all(status != "✗" for status, _ in checks.values()) else 1


def capture_stdin(text: str) -> int:
    """Add a note from piped text (first line is the title)."""
    from jotter.formatting import split_note_text

    title, content = split_note_text(text)
    return cmd_add([title, content] if content else [title])


def main() -> int:
    """Main entry point."""
    args = sys.argv[1:]

    # No args - check for piped input
    if not args:
        if not sys.stdin.isatty():
            text = sys.stdin.read().strip()
            if text:
                return capture_stdin(text)
        print_help()
        return 0

    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    # Subcommands (lazy import to keep startup fast)
    if first_arg == "add":
        return cmd_add(args[1:])

    if first_arg in ("list", "ls"):
        return cmd_list()

    if first_arg == "show":
        return cmd_show(args[1:])

    if first_arg == "edit":
        return cmd_edit(args[1:])

    if first_arg in ("toggle", "done"):
        return cmd_toggle(args[1:])

    if first_arg in ("delete", "rm"):
        return cmd_delete(args[1:])

    if first_arg == "normalize":
        return cmd_normalize(args[1:])

    if first_arg == "stats":
        return cmd_stats()

    if first_arg == "health":
        return cmd_health()

    print(f"Unknown command: {first_arg}", file=sys.stderr)
    print("Run 'jotter --help' for usage.", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
