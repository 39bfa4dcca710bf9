"""
Services for the free-form annotations of a journal: its note and its
metadata entries.

Responsibility:
    Upsert-or-delete semantics.  An empty value (or None) deletes the
    annotation; anything else creates or overwrites it.

Architecture position:
    Kernel > Services.  Used by JournalUpdateService.

Invariants enforced:
    - At most one note per journal and one metadata entry per
      (journal, name).
"""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import TransactionJournal
from ledger_kernel.models.journal_meta import JournalMeta
from ledger_kernel.models.reference import Note
from ledger_kernel.services.base import BaseService

logger = get_logger("services.annotation")


class NoteService(BaseService[Note]):
    """Maintains the single note of a journal."""

    def __init__(self, session: Session, actor_id: UUID):
        super().__init__(session)
        self.actor_id = actor_id

    def update_or_delete(self, journal: TransactionJournal, text: Any) -> Note | None:
        """Set the journal's note text; "" or None deletes the note."""
        text = "" if text is None else str(text)
        note = journal.note

        if text == "":
            if note is not None:
                journal.note = None
                self.session.flush()
                logger.debug("journal_note_deleted", extra={"journal_id": str(journal.id)})
            return None

        if note is None:
            note = Note(text=text, created_by_id=self.actor_id)
            journal.note = note
        else:
            note.text = text
            note.updated_by_id = self.actor_id
        self.session.flush()
        return note


class JournalMetaService(BaseService[JournalMeta]):
    """Maintains named metadata entries of a journal."""

    def __init__(self, session: Session, actor_id: UUID):
        super().__init__(session)
        self.actor_id = actor_id

    def find(self, journal: TransactionJournal, name: str) -> JournalMeta | None:
        return next((m for m in journal.meta if m.name == name), None)

    def update_or_create(self, journal: TransactionJournal, name: str, data: Any) -> JournalMeta | None:
        """
        Upsert the entry ``name`` with ``data``.

        "" or None removes the entry instead; the return value is then None.
        """
        entry = self.find(journal, name)

        if data is None or data == "":
            if entry is not None:
                journal.meta.remove(entry)
                self.session.flush()
                logger.debug("journal_meta_deleted", extra={"journal_id": str(journal.id), "meta_name": name})
            return None

        if entry is None:
            entry = JournalMeta(name=name, data=data, created_by_id=self.actor_id)
            journal.meta.append(entry)
        elif entry.data != data:
            entry.data = data
            entry.updated_by_id = self.actor_id
        self.session.flush()
        return entry
