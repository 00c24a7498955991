"""Default assignee resolution from a template's free-text role."""

import re
from collections.abc import Iterable
from typing import Protocol

_ROLE_SEPARATORS = re.compile(r"[,+]")

DEFAULT_DESIGNER_NAME = "Designer"


class HasDesigner(Protocol):
    designer: str | None


def split_role(role: str | None) -> list[str]:
    """Role tokens, trimmed, with one trailing period removed, empties dropped."""
    if not role:
        return []
    tokens = []
    for raw in _ROLE_SEPARATORS.split(role):
        token = raw.strip()
        if token.endswith("."):
            token = token[:-1].rstrip()
        if token:
            tokens.append(token)
    return tokens


def resolve_token(token: str, designer: str | None, fallback: str = DEFAULT_DESIGNER_NAME) -> str:
    lowered = token.lower()
    if "designer" in lowered:
        return designer or fallback
    if lowered == "admin":
        return "Admin"
    if lowered in ("pm", "project manager"):
        return "PM"
    return token


def dedupe(names: Iterable[str]) -> list[str]:
    """Drop repeats, keeping first-occurrence order."""
    seen: set[str] = set()
    unique = []
    for name in names:
        if name not in seen:
            seen.add(name)
            unique.append(name)
    return unique


def resolve_assignees(
    role: str | None,
    project: HasDesigner | None,
    designer_fallback: str = DEFAULT_DESIGNER_NAME,
) -> list[str]:
    """Ordered, de-duplicated assignees for a role string.

    "Designer, PM" on a project designed by Alice resolves to ["Alice", "PM"].
    """
    designer = getattr(project, "designer", None) if project is not None else None
    return dedupe(
        resolve_token(token, designer, designer_fallback) for token in split_role(role)
    )


def primary_assignee(assignees: Iterable[str]) -> str | None:
    """First assignee, kept for consumers that show a single owner."""
    for name in assignees:
        return name
    return None
