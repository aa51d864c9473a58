"""
In-memory collaborators.

Used by the test-suite and when USE_MOCK_DB is enabled. A single lock per
store keeps the version check and the write together, mirroring the
row-level check a real database performs.
"""

from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, List, Optional
import itertools
import logging

from participium.core.errors import ConflictError
from participium.models.comment import Comment
from participium.models.office import OfficeRouting
from participium.models.report import Report, ReportCreate, ReportStatus
from participium.repositories.base import CommentLedgerStore, OfficeDirectory, ReportStore

logger = logging.getLogger(__name__)


class InMemoryReportStore(ReportStore):

    def __init__(self):
        self._reports: Dict[int, Report] = {}
        self._ids = itertools.count(1)
        self._lock = Lock()

    def create(self, data: ReportCreate) -> Report:
        with self._lock:
            report = Report(
                id=next(self._ids),
                status=ReportStatus.PENDING_APPROVAL,
                created_at=datetime.utcnow(),
                version=0,
                **data.model_dump(),
            )
            self._reports[report.id] = report
        logger.debug(f"Created report {report.id} ({report.category.value})")
        return report.model_copy(deep=True)

    def get(self, report_id: int) -> Optional[Report]:
        with self._lock:
            report = self._reports.get(report_id)
            return report.model_copy(deep=True) if report else None

    def save(self, report: Report) -> Report:
        with self._lock:
            stored = self._reports.get(report.id)
            if stored is None:
                raise ConflictError(f"Report {report.id} no longer exists", report_id=report.id)
            if stored.version != report.version:
                raise ConflictError(
                    f"Report {report.id} was modified concurrently "
                    f"(expected version {report.version}, found {stored.version})",
                    report_id=report.id,
                )
            saved = report.model_copy(update={"version": report.version + 1}, deep=True)
            self._reports[report.id] = saved
            return saved.model_copy(deep=True)

    def list_by_office(self, office: str) -> List[Report]:
        with self._lock:
            return [
                r.model_copy(deep=True)
                for r in sorted(self._reports.values(), key=lambda r: r.id)
                if r.assigned_office == office
            ]


class InMemoryOfficeDirectory(OfficeDirectory):
    """
    Office directory backed by a plain mapping office -> officer ids.

    Usage:
        directory = InMemoryOfficeDirectory(OfficeRouting.default())
        directory.add_officer("sanitation and waste management officer", 7)
    """

    def __init__(self, routing: OfficeRouting, officers: Optional[Dict[str, Iterable[int]]] = None):
        super().__init__(routing)
        self._officers: Dict[str, List[int]] = {}
        for office, ids in (officers or {}).items():
            for officer_id in ids:
                self.add_officer(office, officer_id)

    def add_officer(self, office: str, officer_id: int) -> None:
        members = self._officers.setdefault(office, [])
        if officer_id not in members:
            members.append(officer_id)

    def officers_of(self, office: str) -> List[int]:
        return sorted(self._officers.get(office, []))


class InMemoryCommentLedgerStore(CommentLedgerStore):

    def __init__(self):
        self._comments: Dict[int, List[Comment]] = {}
        self._ids = itertools.count(1)
        self._lock = Lock()

    def append(self, comment: Comment) -> Comment:
        now = datetime.utcnow()
        with self._lock:
            stored = comment.model_copy(update={
                "id": next(self._ids),
                "created_at": comment.created_at or now,
                "updated_at": comment.updated_at or now,
            })
            self._comments.setdefault(stored.report_id, []).append(stored)
        return stored.model_copy()

    def list_by_report(self, report_id: int) -> List[Comment]:
        with self._lock:
            comments = list(self._comments.get(report_id, []))
        # Seeded comments may carry explicit timestamps
        comments.sort(key=lambda c: (c.created_at, c.id))
        return [c.model_copy() for c in comments]
