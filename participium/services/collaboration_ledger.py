"""
Collaboration Ledger - append-only, chronologically ordered comments per report.
"""

from typing import List
import logging

from participium.models.comment import Comment
from participium.repositories.base import CommentLedgerStore

logger = logging.getLogger(__name__)


class CollaborationLedger:

    def __init__(self, store: CommentLedgerStore):
        self._store = store

    def append(self, comment: Comment) -> Comment:
        stored = self._store.append(comment)
        logger.info(
            f"Comment {stored.id} appended to report {stored.report_id} "
            f"by {stored.author_type.value} {stored.author_id}"
        )
        return stored

    def list(self, report_id: int) -> List[Comment]:
        """All comments for a report, oldest first."""
        return self._store.list_by_report(report_id)

    def count(self, report_id: int) -> int:
        return len(self._store.list_by_report(report_id))
