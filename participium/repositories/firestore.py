"""
Firestore-backed collaborators.

Collections:
- reports:            one document per report, document id = str(report.id)
- comments:           one document per comment, queried by report_id
- municipality_users: officers, with municipality_role = office name
- counters:           integer id sequences ("reports", "comments")

Firestore has no auto-increment, so integer ids come from a counter
document bumped inside a transaction. Report saves re-read the stored
version inside a transaction and refuse to write on a mismatch.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from firebase_admin import firestore

from participium.core.errors import ConflictError
from participium.models.comment import Comment
from participium.models.office import OfficeRouting
from participium.models.report import Report, ReportCreate, ReportStatus
from participium.repositories.base import CommentLedgerStore, OfficeDirectory, ReportStore
from participium.utils.firestore_helpers import snapshot_to_dict, where_filter

logger = logging.getLogger(__name__)

REPORTS = "reports"
COMMENTS = "comments"
OFFICERS = "municipality_users"
COUNTERS = "counters"


def _next_id(db, sequence: str) -> int:
    counter_ref = db.collection(COUNTERS).document(sequence)
    transaction = db.transaction()

    @firestore.transactional
    def _bump(transaction) -> int:
        snapshot = counter_ref.get(transaction=transaction)
        current = (snapshot.to_dict() or {}).get("value", 0) if snapshot.exists else 0
        next_value = int(current) + 1
        transaction.set(counter_ref, {"value": next_value})
        return next_value

    return _bump(transaction)


def _report_to_doc(report: Report) -> Dict[str, Any]:
    # Enums as plain strings, timestamps as native datetimes
    data = report.model_dump(mode="json", exclude={"created_at"})
    data["created_at"] = report.created_at
    return data


def _doc_to_report(doc) -> Report:
    data = snapshot_to_dict(doc)
    data.setdefault("id", int(doc.id))
    return Report.model_validate(data)


class FirestoreReportStore(ReportStore):

    def __init__(self, db):
        self.db = db

    def _collection(self):
        return self.db.collection(REPORTS)

    def create(self, data: ReportCreate) -> Report:
        report = Report(
            id=_next_id(self.db, REPORTS),
            status=ReportStatus.PENDING_APPROVAL,
            created_at=datetime.utcnow(),
            version=0,
            **data.model_dump(),
        )
        self._collection().document(str(report.id)).set(_report_to_doc(report))
        logger.debug(f"Created report {report.id} ({report.category.value})")
        return report

    def get(self, report_id: int) -> Optional[Report]:
        doc = self._collection().document(str(report_id)).get()
        if not doc.exists:
            return None
        return _doc_to_report(doc)

    def save(self, report: Report) -> Report:
        doc_ref = self._collection().document(str(report.id))
        transaction = self.db.transaction()

        @firestore.transactional
        def _write(transaction) -> Report:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ConflictError(f"Report {report.id} no longer exists", report_id=report.id)
            stored_version = (snapshot.to_dict() or {}).get("version", 0)
            if stored_version != report.version:
                raise ConflictError(
                    f"Report {report.id} was modified concurrently "
                    f"(expected version {report.version}, found {stored_version})",
                    report_id=report.id,
                )
            saved = report.model_copy(update={"version": report.version + 1})
            transaction.set(doc_ref, _report_to_doc(saved))
            return saved

        return _write(transaction)

    def list_by_office(self, office: str) -> List[Report]:
        query = where_filter(self._collection(), "assigned_office", "==", office)
        reports = [_doc_to_report(doc) for doc in query.stream()]
        reports.sort(key=lambda r: r.id)
        return reports


class FirestoreOfficeDirectory(OfficeDirectory):
    """Officers are municipality users whose municipality_role is the office name."""

    def __init__(self, routing: OfficeRouting, db):
        super().__init__(routing)
        self.db = db

    def officers_of(self, office: str) -> List[int]:
        query = where_filter(self.db.collection(OFFICERS), "municipality_role", "==", office)
        officer_ids = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            officer_ids.append(int(data.get("id", doc.id)))
        return sorted(officer_ids)

    def add_officer(self, office: str, officer_id: int) -> None:
        self.db.collection(OFFICERS).document(str(officer_id)).set(
            {"id": officer_id, "municipality_role": office},
            merge=True,
        )


class FirestoreCommentLedgerStore(CommentLedgerStore):

    def __init__(self, db):
        self.db = db

    def append(self, comment: Comment) -> Comment:
        now = datetime.utcnow()
        stored = comment.model_copy(update={
            "id": _next_id(self.db, COMMENTS),
            "created_at": comment.created_at or now,
            "updated_at": comment.updated_at or now,
        })
        # Both author fields are written, the unused one as an explicit null
        self.db.collection(COMMENTS).document(str(stored.id)).set(stored.model_dump())
        return stored

    def list_by_report(self, report_id: int) -> List[Comment]:
        query = where_filter(self.db.collection(COMMENTS), "report_id", "==", report_id)
        comments = [Comment.model_validate(snapshot_to_dict(doc)) for doc in query.stream()]
        # Sorted in Python to avoid a composite index on (report_id, created_at)
        comments.sort(key=lambda c: (c.created_at, c.id))
        return comments
