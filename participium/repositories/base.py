from abc import ABC, abstractmethod
from typing import List, Optional

from participium.models.comment import Comment
from participium.models.office import OfficeRouting
from participium.models.report import Category, Report, ReportCreate


class ReportStore(ABC):
    """
    Durable record per report.

    Contract:
    - create() assigns an integer id, created_at and status PENDING_APPROVAL
    - save() is optimistic: when the stored version differs from
      report.version it raises ConflictError and writes nothing;
      on success the returned report carries the bumped version
    - get() returns None for unknown ids, never raises NotFound
    """

    @abstractmethod
    def create(self, data: ReportCreate) -> Report:
        raise NotImplementedError

    @abstractmethod
    def get(self, report_id: int) -> Optional[Report]:
        raise NotImplementedError

    @abstractmethod
    def save(self, report: Report) -> Report:
        raise NotImplementedError

    @abstractmethod
    def list_by_office(self, office: str) -> List[Report]:
        raise NotImplementedError


class OfficeDirectory(ABC):
    """Category -> office routing plus the officers staffing each office."""

    def __init__(self, routing: OfficeRouting):
        self.routing = routing

    def office_for_category(self, category: Category) -> str:
        return self.routing.office_for(category)

    @abstractmethod
    def officers_of(self, office: str) -> List[int]:
        """Officer ids of an office, ascending."""
        raise NotImplementedError

    @abstractmethod
    def add_officer(self, office: str, officer_id: int) -> None:
        raise NotImplementedError


class CommentLedgerStore(ABC):
    """Append-only comment storage keyed by report id."""

    @abstractmethod
    def append(self, comment: Comment) -> Comment:
        raise NotImplementedError

    @abstractmethod
    def list_by_report(self, report_id: int) -> List[Comment]:
        """Comments for a report, oldest first."""
        raise NotImplementedError
