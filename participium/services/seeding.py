"""
Seeding / import of demo data.

Seed document (JSON):

    {
      "officers": {"sanitation and waste management officer": [11, 12]},
      "reports": [
        {"ref": 1, "title": "...", "description": "...", "category": "WASTE",
         "latitude": 45.07, "longitude": 7.68, "photos": [], "user_id": 3,
         "status": "IN_PROGRESS", "externalMaintainerId": 40}
      ],
      "comments": [
        {"reportRef": 1, "municipality_user_id": 11, "content": "..."}
      ]
    }

Order of application:
1. Officers are registered in the office directory
2. Reports are created; ASSIGNED / REJECTED go through the state machine,
   external maintainers are attached through the administrative override
3. Comments are added through the comment service (so the guard applies)
4. IN_PROGRESS / SUSPENDED / RESOLVED are applied last through the
   administrative override, since RESOLVED closes the comment channel

Item failures are logged and listed in the summary; the rest of the seed
still applies.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from participium.core.errors import LifecycleError, ValidationError
from participium.models.comment import AuthorType
from participium.models.report import ReportCreate, ReportStatus
from participium.services.registry import ServiceRegistry
from participium.services.retry import retry_on_conflict

logger = logging.getLogger(__name__)

DEFERRED_STATUSES = (ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED, ReportStatus.RESOLVED)

REPORT_FIELDS = ("title", "description", "category", "latitude", "longitude", "photos", "user_id", "anonymous")


@dataclass
class SeedSummary:
    officers: int = 0
    reports: int = 0
    comments: int = 0
    failures: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.failures) == 0


def _as_id(value: Any, field_name: str, report_id: Optional[int] = None) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be an integer id, got {value!r}", report_id=report_id) from e


def load_seed(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def describe_seed(seed: Dict[str, Any]) -> List[str]:
    """One line per item that Seeder.apply would write (dry run)."""
    lines = []
    for office, officer_ids in seed.get("officers", {}).items():
        lines.append(f"officers: {office} ← {list(officer_ids)}")
    for position, source in enumerate(seed.get("reports", []), start=1):
        ref = source.get("ref", position)
        lines.append(f"report {ref}: {source.get('title')!r} [{source.get('status') or 'PENDING_APPROVAL'}]")
    for source in seed.get("comments", []):
        lines.append(f"comment on report {source.get('reportRef')}: {source.get('content', '')[:40]!r}")
    return lines


class Seeder:
    """
    Usage:
        summary = Seeder(registry).apply(load_seed("participium.json"))
    """

    def __init__(self, registry: ServiceRegistry):
        self.registry = registry
        self.lifecycle = registry.lifecycle
        self.comments = registry.comments
        self.attempts = registry.config.CONFLICT_RETRY_ATTEMPTS

    def apply(self, seed: Dict[str, Any]) -> SeedSummary:
        summary = SeedSummary()
        self._seed_officers(seed.get("officers", {}), summary)
        created = self._seed_reports(seed.get("reports", []), summary)
        self._seed_comments(seed.get("comments", []), created, summary)
        self._apply_deferred_statuses(created, summary)
        logger.info(
            f"Seed applied: {summary.officers} officers, {summary.reports} reports, "
            f"{summary.comments} comments, {len(summary.failures)} failures"
        )
        return summary

    def _fail(self, summary: SeedSummary, what: str, error: Exception) -> None:
        message = f"{what}: {error}"
        logger.warning(f"Seed item failed - {message}")
        summary.failures.append(message)

    def _seed_officers(self, officers: Dict[str, List[int]], summary: SeedSummary) -> None:
        for office, officer_ids in officers.items():
            for officer_id in officer_ids:
                self.registry.directory.add_officer(office, int(officer_id))
                summary.officers += 1

    def _seed_reports(self, reports: List[Dict[str, Any]], summary: SeedSummary) -> Dict[Any, Dict[str, Any]]:
        """Create reports; returns seed ref -> {"id": created id, "source": seed entry}."""
        created: Dict[Any, Dict[str, Any]] = {}
        for position, source in enumerate(reports, start=1):
            ref = source.get("ref", position)
            try:
                data = ReportCreate(**{k: source[k] for k in REPORT_FIELDS if k in source})
                report = self.registry.report_store.create(data)
                summary.reports += 1
                created[ref] = {"id": report.id, "source": source}
                self._apply_initial_status(report.id, source)
            except (LifecycleError, PydanticValidationError) as e:
                self._fail(summary, f"report {ref}", e)
        return created

    def _apply_initial_status(self, report_id: int, source: Dict[str, Any]) -> None:
        desired = (source.get("status") or "").upper()
        if desired == ReportStatus.ASSIGNED.value:
            retry_on_conflict(lambda: self.lifecycle.approve(report_id), self.attempts)
        elif desired == ReportStatus.REJECTED.value:
            reason = source.get("rejectionReason")
            retry_on_conflict(lambda: self.lifecycle.reject(report_id, reason), self.attempts)
        elif desired and desired != ReportStatus.PENDING_APPROVAL.value:
            # Validate early; applied after the comments
            self.lifecycle.workflow.parse_status(desired)

        maintainer_id = source.get("externalMaintainerId")
        if maintainer_id is not None:
            maintainer_id = _as_id(maintainer_id, "externalMaintainerId", report_id)
            retry_on_conflict(
                lambda: self.lifecycle.administrative_override(report_id, external_maintainer_id=maintainer_id),
                self.attempts,
            )

    def _seed_comments(
        self,
        comments: List[Dict[str, Any]],
        created: Dict[Any, Dict[str, Any]],
        summary: SeedSummary,
    ) -> None:
        for source in comments:
            ref = source.get("reportRef")
            try:
                if ref not in created:
                    raise LifecycleError(f"unknown report ref {ref!r}")
                if source.get("municipality_user_id") is not None:
                    author_type, author_id = AuthorType.MUNICIPALITY, source["municipality_user_id"]
                else:
                    author_type, author_id = AuthorType.EXTERNAL_MAINTAINER, source.get("external_maintainer_id")
                self.comments.add_comment(created[ref]["id"], author_id, author_type, source.get("content"))
                summary.comments += 1
            except (LifecycleError, PydanticValidationError) as e:
                self._fail(summary, f"comment on report {ref}", e)

    def _apply_deferred_statuses(self, created: Dict[Any, Dict[str, Any]], summary: SeedSummary) -> None:
        for ref, entry in created.items():
            source = entry["source"]
            desired = (source.get("status") or "").upper()
            if desired not in {s.value for s in DEFERRED_STATUSES}:
                continue
            try:
                retry_on_conflict(lambda: self._override_status(entry["id"], desired, source), self.attempts)
            except LifecycleError as e:
                self._fail(summary, f"status {desired} for report {ref}", e)

    def _override_status(self, report_id: int, desired: str, source: Dict[str, Any]):
        report = self.lifecycle.get_report(report_id)
        office: Optional[str] = source.get("assignedOffice") or report.assigned_office
        officer_id: Optional[int] = source.get("assignedOfficerId") or report.assigned_officer_id
        if office is None or officer_id is None:
            assignment = self.lifecycle.resolver.resolve(report.category)
            office = office or assignment.office
            officer_id = officer_id or assignment.officer_id
        return self.lifecycle.administrative_override(
            report_id,
            status=desired,
            assigned_office=office,
            assigned_officer_id=officer_id,
            rejection_reason=None,
        )
