"""
Assignment Resolver - picks the office and officer for an approved report.

RULES:
- Category -> office comes from the injected OfficeRouting
- Officer = fewest open (not RESOLVED / REJECTED) reports assigned to them
  within that office; ties go to the lowest officer id
- An office with no officers is a deployment error and is raised
- Pure lookup: the caller writes the result onto the report

The load count and the later write are not atomic. Two approvals racing
for the same office can both see the same least-loaded officer; the
imbalance lasts until the next approval reads fresh counts.
"""

from dataclasses import dataclass
from typing import Dict, List
import logging

from participium.core.errors import ConfigurationError
from participium.models.report import Category, Report
from participium.repositories.base import OfficeDirectory, ReportStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    """Result of an assignment lookup."""
    office: str
    officer_id: int
    open_reports: int


class AssignmentResolver:
    """
    Usage:
        resolver = AssignmentResolver(directory, store)
        assignment = resolver.resolve(Category.WASTE)
        report.assigned_office = assignment.office
        report.assigned_officer_id = assignment.officer_id
    """

    def __init__(self, directory: OfficeDirectory, store: ReportStore):
        self._directory = directory
        self._store = store

    def office_for(self, category: Category) -> str:
        # A value outside the enum is a programming error, let it raise
        category = Category(category)
        return self._directory.office_for_category(category)

    def open_workload(self, office: str) -> Dict[int, int]:
        """Open report count per officer of ``office`` (zero for idle officers)."""
        officers = self._directory.officers_of(office)
        workload = {officer_id: 0 for officer_id in officers}
        reports: List[Report] = self._store.list_by_office(office)
        for report in reports:
            if report.is_open and report.assigned_officer_id in workload:
                workload[report.assigned_officer_id] += 1
        return workload

    def resolve(self, category: Category) -> Assignment:
        office = self.office_for(category)
        workload = self.open_workload(office)

        if not workload:
            logger.error(f"No officers configured for office '{office}' (category {Category(category).value})")
            raise ConfigurationError(
                f"Office '{office}' has no officers to assign reports to",
                office=office,
                category=Category(category).value,
            )

        officer_id, open_reports = min(workload.items(), key=lambda item: (item[1], item[0]))
        logger.info(f"Resolved {Category(category).value} → '{office}', officer {officer_id} ({open_reports} open)")
        return Assignment(office=office, officer_id=officer_id, open_reports=open_reports)
