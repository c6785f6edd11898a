"""Per-operation journal of committed external effects.

Each ledger call that succeeds during an operation is recorded together
with the call that reverses it. If a later step fails, the journal undoes
the recorded effects newest-first so the operation leaves no net trace.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger()


@dataclass
class JournalEntry:
    """A committed effect and its compensation."""

    description: str
    compensate: Callable[[], None]


@dataclass
class Journal:
    """Ordered record of effects committed by one operation."""

    operation: str
    entries: list[JournalEntry] = field(default_factory=list)

    def run(self, description: str, effect: Callable[[], None], compensate: Callable[[], None]) -> None:
        """Perform effect and, once it has succeeded, record its compensation.

        A failing effect is not recorded: it committed nothing to undo.
        """
        effect()
        self.entries.append(JournalEntry(description, compensate))

    def rollback(self) -> list[str]:
        """Undo recorded effects newest-first.

        Every compensation is attempted even if an earlier one fails.

        Returns:
            Descriptions of the effects that could not be undone
        """
        failed: list[str] = []
        while self.entries:
            entry = self.entries.pop()
            try:
                entry.compensate()
            except Exception:
                logger.exception(
                    "compensation_failed",
                    operation=self.operation,
                    effect=entry.description,
                )
                failed.append(entry.description)
        return failed

    def __len__(self) -> int:
        return len(self.entries)
