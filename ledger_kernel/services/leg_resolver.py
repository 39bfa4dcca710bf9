"""
LegResolver -- locate the source and destination legs of a journal.

Responsibility:
    Splits a journal's legs by sign: the negative one is the source, the
    positive one the destination.  The pair is resolved once per update and
    handed to every step that touches amounts, currencies or accounts.

Architecture position:
    Kernel > Services.  Called by JournalUpdateService only.

Invariants enforced:
    - Double entry: both legs must exist.  A journal without either leg is
      corrupt ledger data.

Failure modes:
    - LegNotFoundError (fatal; never converted into a step outcome).
"""

from dataclasses import dataclass

from ledger_kernel.exceptions import LegNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalLeg, TransactionJournal
from ledger_kernel.services.base import BaseService

logger = get_logger("services.leg_resolver")


@dataclass(frozen=True)
class LegPair:
    """The two legs of one journal."""

    source: JournalLeg
    destination: JournalLeg


class LegResolver(BaseService[JournalLeg]):
    """Resolves and reloads the two legs of a journal."""

    def resolve(self, journal: TransactionJournal) -> LegPair:
        """
        Return the (source, destination) legs of ``journal``.

        Raises:
            LegNotFoundError: journal has no negative or no positive leg.
        """
        source = next((leg for leg in journal.legs if leg.amount < 0), None)
        if source is None:
            logger.error("source_leg_missing", extra={"journal_id": str(journal.id)})
            raise LegNotFoundError(str(journal.id), "source")

        destination = next((leg for leg in journal.legs if leg.amount > 0), None)
        if destination is None:
            logger.error("destination_leg_missing", extra={"journal_id": str(journal.id)})
            raise LegNotFoundError(str(journal.id), "destination")

        return LegPair(source=source, destination=destination)

    def refresh(self, pair: LegPair) -> LegPair:
        """Flush pending changes and reload both legs from the database."""
        self.session.flush()
        self.session.refresh(pair.source)
        self.session.refresh(pair.destination)
        return pair
