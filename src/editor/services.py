"""I/O services for the draft editor: the local draft slot and the loader."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from blogdesk.editor.models import Draft
from blogdesk.editor.store import DraftStore

logger = logging.getLogger(__name__)

DRAFT_FILENAME = ".blogdesk-draft.json"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DraftStorage:
    """Single named slot holding the serialized draft.

    Each save overwrites the previous one wholesale; there is no history.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = _utcnow) -> None:
        self.path = path
        self._clock = clock

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, draft: Draft) -> Draft:
        """Write the draft stamped with the current time and return it.

        Raises:
            OSError: If the slot cannot be written.
        """
        stamped = draft.model_copy(update={"last_modified": self._clock()})
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            stamped.model_dump_json(by_alias=True, indent=2),
            encoding="utf-8",
        )
        logger.debug("Draft saved to %s", self.path)
        return stamped

    def load(self) -> Draft | None:
        """Read the stored draft.

        Returns None if nothing is stored or the stored data is corrupt.
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Draft.model_validate(data)
        except (json.JSONDecodeError, ValueError, KeyError, OSError):
            logger.warning("Corrupt draft at %s, starting fresh", self.path)
            return None

    def clear(self) -> None:
        """Remove the stored draft. Missing files are fine."""
        self.path.unlink(missing_ok=True)


def load_session(storage: DraftStorage, initial: Draft | None = None) -> DraftStore:
    """Build the store for a new authoring session.

    When editing an existing post, ``initial`` seeds the store and the
    local draft is ignored entirely. Otherwise the stored draft is
    restored if it parses, and defaults are used if it does not.
    """
    if initial is not None:
        return DraftStore.from_draft(initial)
    draft = storage.load()
    if draft is None:
        return DraftStore()
    logger.info("Restored draft last saved %s", draft.last_modified)
    return DraftStore.from_draft(draft)
