"""
Formatting module for Jotter.

Renders the notes list and note detail views for the terminal.
"""

import os
from typing import Iterable

from jotter.models import Note


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    STRIKE = "\033[9m"

    # Foreground colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"

    # Bright foreground colors
    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_GREEN = "\033[92m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        # Disable if NO_COLOR is set
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


DONE_MARKER = "✓"
PREVIEW_WIDTH = 50


def format_id(note_id: object) -> str:
    """Short form of a note ID (first 8 hex digits)."""
    return str(note_id).replace("-", "")[:8]


def preview(text: str, width: int = PREVIEW_WIDTH) -> str:
    """Single-line preview of note content."""
    line = " ".join(text.split())
    if len(line) <= width:
        return line
    return line[: width - 1] + "…"


def format_title(note: Note) -> str:
    """Title, struck through once the note is completed."""
    title = note.title or "(untitled)"
    if note.is_completed:
        if Colors.enabled():
            return c(title, Colors.STRIKE, Colors.BRIGHT_BLACK)
        return f"~{title}~"
    return c(title, Colors.BOLD)


def format_notes_list(notes: Iterable[Note]) -> str:
    """List view: position, completion marker, title and content preview."""
    notes = list(notes)

    if not notes:
        return c("No notes yet.", Colors.DIM)

    lines = []

    # Header
    lines.append(c(f"━━━ NOTES ({len(notes)}) ━━━", Colors.BOLD, Colors.BLUE))
    lines.append("")

    for position, note in enumerate(notes, 1):
        marker = c(DONE_MARKER, Colors.BRIGHT_GREEN) if note.is_completed else " "
        seq_str = c(f"{position:>4}", Colors.BOLD, Colors.WHITE)
        id_str = c(format_id(note.id), Colors.DIM)

        lines.append(f"{seq_str} {marker} {id_str}  {format_title(note)}")
        if note.content:
            lines.append(c(f"{'':16}{preview(note.content)}", Colors.DIM))

    return "\n".join(lines)


def format_note_detail(note: Note, position: int | None = None) -> str:
    """Detail view for a single note."""
    heading = f"#{position} " if position is not None else ""
    status = (
        c("Completed", Colors.GREEN) if note.is_completed
        else c("Not completed", Colors.RED)
    )

    lines = [
        c(f"━━━ {heading}{note.title or '(untitled)'} ━━━", Colors.BOLD, Colors.BLUE),
        c(f"id: {note.id}", Colors.DIM),
        f"status: {status}",
        "",
        note.content,
    ]
    return "\n".join(lines).rstrip()


def split_note_text(text: str, separator: str | None = None) -> tuple[str, str]:
    """
    Split free text into (title, content).

    With a separator ("Milk | Buy milk") the text is split on its first
    occurrence; otherwise the first line is the title and the rest the content.
    """
    if separator and separator in text:
        title, content = text.split(separator, 1)
        return title.strip(), content.strip()

    title, _, content = text.strip().partition("\n")
    return title.strip(), content.strip()
