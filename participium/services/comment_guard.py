"""
Comment Authorization Guard - who may write on a report's channel, and as whom.

RULES (checked in this order):
1. Unknown report → NotFound
2. RESOLVED report → Forbidden for everybody
3. MUNICIPALITY → always allowed, assigned or not
4. EXTERNAL_MAINTAINER → only on reports whose external_maintainer_id
   is exactly the author
5. Any other author type (citizens included) → ValidationError

REJECTED reports stay open for discussion; only RESOLVED closes the channel.
"""

from typing import Optional, Union
import logging

from participium.core.errors import Forbidden, NotFound, ValidationError
from participium.models.comment import AuthorType, Comment
from participium.models.report import Report, ReportStatus
from participium.repositories.base import ReportStore

logger = logging.getLogger(__name__)


def parse_author_type(value: Union[AuthorType, str, None]) -> AuthorType:
    """
    Narrow caller input to one of the two authorised author types.

    Raises:
        ValidationError: For anything else, including "CITIZEN" and None
    """
    if isinstance(value, AuthorType):
        return value
    try:
        return AuthorType(value)
    except ValueError:
        raise ValidationError(f"Invalid author type: {value!r}", author_type=str(value))


class CommentAuthorizationGuard:

    def __init__(self, store: ReportStore):
        self._store = store

    def load_report(self, report_id: int) -> Report:
        report = self._store.get(report_id)
        if report is None:
            raise NotFound(f"Report {report_id} not found", report_id=report_id)
        return report

    def authorize(
        self,
        report_id: int,
        author_id: int,
        author_type: Union[AuthorType, str, None],
        content: Optional[str] = None,
    ) -> Comment:
        """
        Check the author against the report and build the tagged comment.

        The comment is returned unsaved; the ledger assigns id and timestamps.

        Raises:
            NotFound: Unknown report
            Forbidden: Resolved report, or maintainer not attached to it
            ValidationError: Invalid author type or empty content
        """
        return self.check(self.load_report(report_id), author_id, author_type, content)

    def check(
        self,
        report: Report,
        author_id: int,
        author_type: Union[AuthorType, str, None],
        content: Optional[str] = None,
    ) -> Comment:
        """Same as authorize(), for a report the caller already loaded."""
        report_id = report.id

        if report.status == ReportStatus.RESOLVED:
            logger.warning(f"Refused comment by {author_type} {author_id} on resolved report {report_id}")
            raise Forbidden(
                "Cannot comment on a resolved report",
                report_id=report_id,
                actor_id=author_id,
                author_type=str(getattr(author_type, "value", author_type)),
                current=report.status.value,
            )

        kind = parse_author_type(author_type)

        if author_id is None:
            raise ValidationError("Comment author id is required", report_id=report_id, author_type=kind.value)

        if kind == AuthorType.EXTERNAL_MAINTAINER and report.external_maintainer_id != author_id:
            logger.warning(
                f"Refused comment by external maintainer {author_id} on report {report_id} "
                f"(attached maintainer: {report.external_maintainer_id})"
            )
            raise Forbidden(
                "External maintainers may only comment on reports assigned to them",
                report_id=report_id,
                actor_id=author_id,
                author_type=kind.value,
            )

        if content is None or not content.strip():
            raise ValidationError("Comment content must not be empty", report_id=report_id, actor_id=author_id)

        return Comment.authored_by(report_id, kind, author_id, content.strip())
