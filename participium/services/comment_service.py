"""
Comment Service - the municipality <-> external maintainer channel on a report.
"""

from typing import List, Optional, Union
import logging

from participium.core.errors import ValidationError
from participium.core.settings import settings
from participium.models.comment import AuthorType, Comment
from participium.models.events import EventKind, LifecycleEvent, Recipient, RecipientRole
from participium.repositories.base import CommentLedgerStore, ReportStore
from participium.services.collaboration_ledger import CollaborationLedger
from participium.services.comment_guard import CommentAuthorizationGuard
from participium.services.events import EventSink, LoggingEventSink, publish_committed, staff_recipients

logger = logging.getLogger(__name__)


class CommentService:
    """Service for managing comments on reports."""

    def __init__(
        self,
        store: ReportStore,
        ledger_store: CommentLedgerStore,
        events: Optional[EventSink] = None,
        max_length: Optional[int] = None,
    ):
        self.guard = CommentAuthorizationGuard(store)
        self.ledger = CollaborationLedger(ledger_store)
        self.events = events or LoggingEventSink()
        self.max_length = settings.COMMENT_MAX_LENGTH if max_length is None else max_length

    def add_comment(
        self,
        report_id: int,
        author_id: int,
        author_type: Union[AuthorType, str],
        content: str,
    ) -> Comment:
        """
        Add a comment to a report.

        Args:
            report_id: Report to comment on
            author_id: Municipality user id or external maintainer id
            author_type: MUNICIPALITY or EXTERNAL_MAINTAINER
            content: Comment text (stripped, non-empty)

        Returns:
            The stored comment, with exactly one author field set

        Raises:
            NotFound, Forbidden, ValidationError
            EventDeliveryError: The comment is stored but its event was not delivered
        """
        report = self.guard.load_report(report_id)
        comment = self.guard.check(report, author_id, author_type, content)
        if len(comment.content) > self.max_length:
            raise ValidationError(
                f"Comment content exceeds {self.max_length} characters",
                report_id=report_id,
                actor_id=author_id,
            )
        stored = self.ledger.append(comment)

        author = Recipient(user_id=stored.author_id, role=RecipientRole(stored.author_type.value))
        event = LifecycleEvent(
            kind=EventKind.COMMENT_ADDED,
            report_id=report_id,
            recipients=staff_recipients(report, exclude=author),
            payload={"comment": stored.model_dump(mode="json")},
        )
        publish_committed(self.events, event, stored)
        return stored

    def get_comments(self, report_id: int) -> List[Comment]:
        """
        Get all comments for a report, sorted by creation time (oldest first).

        Raises:
            NotFound: Unknown report
        """
        self.guard.load_report(report_id)
        return self.ledger.list(report_id)
