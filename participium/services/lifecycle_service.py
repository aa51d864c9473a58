"""
Report Lifecycle Service - entry point for status and assignment changes.

Each operation:
1. Loads the report (NotFound if absent)
2. Validates and computes the new state on a copy (status_workflow)
3. Writes once through the store (ConflictError if the report changed meanwhile)
4. Publishes a LifecycleEvent

A refused operation raises before step 3, so the store is never touched.
A sink failure in step 4 comes after the write and surfaces as
EventDeliveryError carrying the stored report; it is not a reason to retry.
Concurrent writers are detected by the store's version check; retrying is
up to the caller (services.retry.retry_on_conflict).
"""

from typing import List, Optional
import logging

from participium.core.errors import NotFound
from participium.models.report import Report, ReportStatus
from participium.repositories.base import ReportStore
from participium.services.assignment_resolver import AssignmentResolver
from participium.services.events import (
    EventSink,
    LoggingEventSink,
    maintainer_attached_event,
    publish_committed,
    status_changed_event,
)
from participium.services.status_workflow import StatusLike, StatusWorkflowEngine

logger = logging.getLogger(__name__)


class ReportLifecycleService:
    """
    Usage:
        lifecycle = ReportLifecycleService(store, resolver, events)
        lifecycle.approve(5)
        lifecycle.change_status(5, "IN_PROGRESS")
    """

    def __init__(
        self,
        store: ReportStore,
        resolver: AssignmentResolver,
        events: Optional[EventSink] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.events = events or LoggingEventSink()
        self.workflow = StatusWorkflowEngine()

    def get_report(self, report_id: int) -> Report:
        report = self.store.get(report_id)
        if report is None:
            raise NotFound(f"Report {report_id} not found", report_id=report_id)
        return report

    def allowed_transitions(self, report_id: int) -> List[str]:
        report = self.get_report(report_id)
        return self.workflow.get_allowed_transitions(report.status)

    def approve(self, report_id: int) -> Report:
        """
        Approve a pending report and route it to an office and officer.

        Raises:
            NotFound: Unknown report
            InvalidTransition: Report is not PENDING_APPROVAL
            ConfigurationError: The resolved office has no officers
        """
        report = self.get_report(report_id)
        # Checked before resolving so a refused approval does no load counting
        self.workflow.validate_transition(report.status, ReportStatus.ASSIGNED, report.id)
        assignment = self.resolver.resolve(report.category)
        updated = self.workflow.approve(report, assignment)
        return self._commit(report, updated)

    def reject(self, report_id: int, reason: Optional[str]) -> Report:
        """
        Reject a pending report.

        Raises:
            NotFound: Unknown report
            InvalidTransition: Report is not PENDING_APPROVAL
            ValidationError: Missing or blank reason
        """
        report = self.get_report(report_id)
        updated = self.workflow.reject(report, reason)
        return self._commit(report, updated)

    def change_status(
        self,
        report_id: int,
        new_status: StatusLike,
        rejection_reason: Optional[str] = None,
    ) -> Report:
        """
        Generic status change; ASSIGNED and REJECTED are routed to
        approve() / reject() so their side data is enforced.
        """
        target = self.workflow.parse_status(new_status)
        if target == ReportStatus.ASSIGNED:
            return self.approve(report_id)
        if target == ReportStatus.REJECTED:
            return self.reject(report_id, rejection_reason)

        report = self.get_report(report_id)
        updated = self.workflow.transition(report, target)
        return self._commit(report, updated)

    def attach_external_maintainer(self, report_id: int, maintainer_id: int) -> Report:
        """
        Attach (or replace) the external maintainer working on a report.

        Raises:
            NotFound: Unknown report
            InvalidTransition: Report is not ASSIGNED, IN_PROGRESS or SUSPENDED
        """
        report = self.get_report(report_id)
        updated = self.workflow.attach_maintainer(report, maintainer_id)
        saved = self.store.save(updated)
        logger.info(f"External maintainer {maintainer_id} attached to report {report_id}")
        publish_committed(self.events, maintainer_attached_event(saved), saved)
        return saved

    def administrative_override(self, report_id: int, **fields) -> Report:
        """
        Set lifecycle fields directly, bypassing the transition table.

        For seed/import tooling only. Accepts status, assigned_office,
        assigned_officer_id, external_maintainer_id and rejection_reason.

        Raises:
            NotFound: Unknown report
            ValidationError: Result breaks the rejection-reason invariant
        """
        report = self.get_report(report_id)
        updated = self.workflow.override(report, **fields)
        saved = self.store.save(updated)
        logger.info(
            f"Administrative override on report {report_id}: "
            f"{report.status.value} → {saved.status.value} ({', '.join(sorted(fields)) or 'no fields'})"
        )
        if saved.status != report.status:
            publish_committed(self.events, status_changed_event(saved, report.status.value), saved)
        return saved

    def _commit(self, before: Report, updated: Report) -> Report:
        saved = self.store.save(updated)
        logger.info(f"Report {saved.id}: {before.status.value} → {saved.status.value}")
        publish_committed(self.events, status_changed_event(saved, before.status.value), saved)
        return saved
