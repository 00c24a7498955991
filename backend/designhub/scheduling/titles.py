"""Task title normalization and the per-project title index.

Rules and reminders name tasks by title. Titles are compared after
normalization so that typography (curly quotes, en dashes, non-breaking
spaces) and letter case never decide whether a rule fires. Legacy titles that
predate a rename are mapped to the current title first.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from uuid import UUID

from designhub.scheduling.types import TaskRecord, TaskTemplateRecord

_CHAR_MAP = str.maketrans(
    {
        "\u2018": "'",  # left single quote
        "\u2019": "'",  # right single quote
        "\u201a": "'",
        "\u201b": "'",
        "\u2032": "'",  # prime
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u201f": '"',
        "\u2033": '"',
        "\u2010": "-",  # hyphen
        "\u2011": "-",  # non-breaking hyphen
        "\u2012": "-",  # figure dash
        "\u2013": "-",  # en dash
        "\u2014": "-",  # em dash
        "\u2015": "-",
        "\u2212": "-",  # minus sign
        "\u00a0": " ",  # NBSP
        "\u2007": " ",
        "\u2009": " ",
        "\u202f": " ",
    }
)
_WHITESPACE = re.compile(r"\s+")

# Legacy or mistyped titles found in older projects -> current title
TITLE_ALIASES: dict[str, str] = {
    "Weekly Double Tab - Send IP to Client": "Weekly Double Tap – Send IP to Client",
    "Weekly Double Tap - Send IP": "Weekly Double Tap – Send IP to Client",
    "Have Initial Consult": "Have Initial Consultation",
    "Confirm Initial Consult": "Confirm Initial Consultation",
    "Update Jae on Install Timeline": "Update Jae on Install Timing",
    "Send Design Agreement to Client": "Send Design Agreement",
}


def fold_title(title: str | None) -> str:
    """Typography- and case-insensitive form of a title, without alias lookup."""
    if not title:
        return ""
    folded = title.translate(_CHAR_MAP).casefold()
    return _WHITESPACE.sub(" ", folded).strip()


_FOLDED_ALIASES: dict[str, str] = {
    fold_title(legacy): fold_title(canonical) for legacy, canonical in TITLE_ALIASES.items()
}


def normalize(title: str | None) -> str:
    """Canonical comparison key for a task title."""
    folded = fold_title(title)
    return _FOLDED_ALIASES.get(folded, folded)


def _sort_key(item: tuple[int, TaskRecord]) -> tuple[int, datetime, int]:
    arrival, task = item
    created = task.created_at or datetime.min
    if created.tzinfo is not None:
        created = created.replace(tzinfo=None)
    return (task.position, created, arrival)


def ordered_tasks(tasks: Iterable[TaskRecord]) -> list[TaskRecord]:
    """Tasks by position, then creation time, then arrival order."""
    return [task for _, task in sorted(enumerate(tasks), key=_sort_key)]


class TitleIndex:
    """Normalized title -> task ids in position order.

    A task linked to a known template is keyed by the template's title, so a
    task renamed in one project still answers to the rules written for its
    template. Tasks with no template link are keyed by their own title.
    """

    def __init__(
        self,
        entries: Mapping[str, list[UUID]],
        keys: Mapping[UUID, str],
    ) -> None:
        self._entries = {key: list(ids) for key, ids in entries.items()}
        self._keys = dict(keys)

    @classmethod
    def build(
        cls,
        tasks: Iterable[TaskRecord],
        templates: Iterable[TaskTemplateRecord] | None = None,
    ) -> TitleIndex:
        template_titles = {t.id: normalize(t.title) for t in (templates or ())}
        entries: dict[str, list[UUID]] = {}
        keys: dict[UUID, str] = {}
        for task in ordered_tasks(tasks):
            key = title_key(task, template_titles)
            keys[task.id] = key
            entries.setdefault(key, []).append(task.id)
        return cls(entries, keys)

    def key_for(self, task_id: UUID) -> str | None:
        return self._keys.get(task_id)

    def occurrences(self, title: str) -> list[UUID]:
        return list(self._entries.get(normalize(title), ()))

    def find_by_occurrence(self, title: str, occurrence: int = 1) -> UUID | None:
        """Id of the n-th (1-based) task with this title, or None."""
        if occurrence < 1:
            return None
        ids = self.occurrences(title)
        if occurrence > len(ids):
            return None
        return ids[occurrence - 1]

    def occurrence_of(self, task_id: UUID) -> int | None:
        key = self._keys.get(task_id)
        if key is None:
            return None
        return self._entries[key].index(task_id) + 1

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, title: object) -> bool:
        return isinstance(title, str) and normalize(title) in self._entries


def title_key(task: TaskRecord, template_titles: Mapping[UUID, str]) -> str:
    if task.template_id is not None and task.template_id in template_titles:
        return template_titles[task.template_id]
    return normalize(task.title)
