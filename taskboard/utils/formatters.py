"""
Message formatting utilities
"""

from typing import Optional
from taskboard.config.constants import PALETTE_SIZE
from taskboard.models.task import Stage


def format_task_created(title: str) -> str:
    """
    Format task creation confirmation message

    Args:
        title: Task title

    Returns:
        Formatted message
    """
    return f"Task '{title}' was added to the board"


def format_task_moved(from_stage: Stage, to_stage: Stage) -> str:
    """
    Format the message shown after a task changed columns

    Args:
        from_stage: Column the task left
        to_stage: Column the task was dropped on

    Returns:
        Formatted message naming both columns
    """
    return f'The task was moved from "{from_stage.label}" to "{to_stage.label}".'


def format_contact_created(name: str) -> str:
    return f"Contact {name} saved"


def format_deleted(kind: str, label: Optional[str] = None) -> str:
    """Confirmation shown after a task or contact was deleted"""
    if label:
        return f"{kind.capitalize()} '{label}' deleted"
    return f"{kind.capitalize()} deleted"


def format_delete_prompt(kind: str, label: Optional[str] = None) -> str:
    """
    Format the confirmation question of a pending deletion

    Args:
        kind: "task" or "contact"
        label: Title or name of the item, if known

    Returns:
        Question shown next to the Cancel / Delete buttons
    """
    if label:
        return f"Delete {kind} '{label}'? This cannot be undone."
    return f"Delete this {kind}? This cannot be undone."


def palette_color(color: Optional[int], fallback_key: str = "") -> int:
    """
    Palette index used to render an avatar or card

    Items without a stored color get a stable index derived from their id.

    Args:
        color: Stored palette index (1..PALETTE_SIZE)
        fallback_key: Id or initials of the item

    Returns:
        Palette index in 1..PALETTE_SIZE
    """
    if color and 1 <= color <= PALETTE_SIZE:
        return color
    key = fallback_key or "X"
    return ord(key[0]) % PALETTE_SIZE + 1
