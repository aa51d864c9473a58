"""
Status Workflow Engine - report lifecycle state machine.

DESIGN PRINCIPLES:
- Only transitions listed in ALLOWED_TRANSITIONS are accepted
- REJECTED requires a non-empty reason; ASSIGNED requires an assignment
- Every operation works on a copy: a refused transition leaves the
  caller's report untouched
- The administrative override skips the table but not the
  rejection-reason invariant
"""

from typing import Dict, FrozenSet, List, Optional, Union
import logging

from participium.core.errors import InvalidTransition, ValidationError
from participium.models.report import Report, ReportStatus
from participium.services.assignment_resolver import Assignment

logger = logging.getLogger(__name__)

StatusLike = Union[ReportStatus, str]

# Statuses during which an external maintainer may be attached
MAINTAINER_ATTACHABLE: FrozenSet[ReportStatus] = frozenset({
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
})

_UNSET = object()


class StatusWorkflowEngine:
    """
    Strict state machine for report status transitions.

    PENDING_APPROVAL → ASSIGNED | REJECTED
    ASSIGNED → IN_PROGRESS
    IN_PROGRESS → SUSPENDED | RESOLVED
    SUSPENDED → IN_PROGRESS | RESOLVED
    RESOLVED, REJECTED: terminal
    """

    # Allowed transitions map: {from_status: [to_status, ...]}
    ALLOWED_TRANSITIONS: Dict[ReportStatus, List[ReportStatus]] = {
        ReportStatus.PENDING_APPROVAL: [ReportStatus.ASSIGNED, ReportStatus.REJECTED],
        ReportStatus.ASSIGNED: [ReportStatus.IN_PROGRESS],
        ReportStatus.IN_PROGRESS: [ReportStatus.SUSPENDED, ReportStatus.RESOLVED],
        ReportStatus.SUSPENDED: [ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED],
        ReportStatus.RESOLVED: [],  # Terminal state, no transitions allowed
        ReportStatus.REJECTED: [],  # Terminal state, no transitions allowed
    }

    @classmethod
    def parse_status(cls, value: StatusLike) -> ReportStatus:
        """
        Convert user input to a ReportStatus.

        Raises:
            ValidationError: If the value is not a known status
        """
        if isinstance(value, ReportStatus):
            return value
        try:
            return ReportStatus(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown report status: {value!r}", requested=str(value))

    @classmethod
    def is_valid_transition(cls, from_status: StatusLike, to_status: StatusLike) -> bool:
        """
        Check if a status transition is valid.

        Unknown statuses and same-status "transitions" are never valid.
        """
        try:
            from_enum = cls.parse_status(from_status)
            to_enum = cls.parse_status(to_status)
        except ValidationError:
            return False
        return to_enum in cls.ALLOWED_TRANSITIONS.get(from_enum, [])

    @classmethod
    def get_allowed_transitions(cls, current_status: StatusLike) -> List[str]:
        """
        Get list of allowed next statuses from current status.

        Returns:
            List of allowed next status strings (empty for terminal or unknown states)
        """
        try:
            current_enum = cls.parse_status(current_status)
        except ValidationError:
            return []
        return [status.value for status in cls.ALLOWED_TRANSITIONS.get(current_enum, [])]

    @classmethod
    def validate_transition(
        cls,
        current_status: StatusLike,
        new_status: StatusLike,
        report_id: Optional[int] = None,
    ) -> ReportStatus:
        """
        Validate a transition and return the target status.

        Raises:
            ValidationError: If new_status is not a known status
            InvalidTransition: If the table does not allow the move
        """
        current = cls.parse_status(current_status)
        target = cls.parse_status(new_status)

        if target not in cls.ALLOWED_TRANSITIONS.get(current, []):
            allowed = cls.get_allowed_transitions(current)
            logger.warning(f"Refused transition for report {report_id}: {current.value} → {target.value}")
            raise InvalidTransition(
                current=current.value,
                requested=target.value,
                report_id=report_id,
                message=(
                    f"Invalid status transition: {current.value} → {target.value}. "
                    f"Allowed transitions from {current.value}: {allowed}"
                ),
            )
        return target

    @staticmethod
    def normalize_reason(reason: Optional[str]) -> Optional[str]:
        if reason is None:
            return None
        reason = reason.strip()
        return reason or None

    @classmethod
    def check_invariants(cls, report: Report) -> None:
        """
        rejection_reason must be non-empty iff the report is REJECTED.

        Raises:
            ValidationError: If the invariant does not hold
        """
        reason = cls.normalize_reason(report.rejection_reason)
        if report.status == ReportStatus.REJECTED and reason is None:
            raise ValidationError(
                "A rejection reason is required to reject a report",
                report_id=report.id,
                requested=ReportStatus.REJECTED.value,
            )
        if report.status != ReportStatus.REJECTED and reason is not None:
            raise ValidationError(
                f"A rejection reason can only be set on REJECTED reports (status is {report.status.value})",
                report_id=report.id,
                requested=report.status.value,
            )

    @classmethod
    def approve(cls, report: Report, assignment: Assignment) -> Report:
        """PENDING_APPROVAL → ASSIGNED, recording the resolved office and officer."""
        cls.validate_transition(report.status, ReportStatus.ASSIGNED, report.id)
        return report.model_copy(update={
            "status": ReportStatus.ASSIGNED,
            "assigned_office": assignment.office,
            "assigned_officer_id": assignment.officer_id,
        })

    @classmethod
    def reject(cls, report: Report, reason: Optional[str]) -> Report:
        """PENDING_APPROVAL → REJECTED with a mandatory reason."""
        cls.validate_transition(report.status, ReportStatus.REJECTED, report.id)
        reason = cls.normalize_reason(reason)
        if reason is None:
            logger.warning(f"Refused rejection of report {report.id}: no reason given")
            raise ValidationError(
                "A rejection reason is required to reject a report",
                report_id=report.id,
                current=report.status.value,
                requested=ReportStatus.REJECTED.value,
            )
        return report.model_copy(update={
            "status": ReportStatus.REJECTED,
            "rejection_reason": reason,
        })

    @classmethod
    def transition(cls, report: Report, new_status: StatusLike) -> Report:
        """
        Plain transitions that need no side data.

        ASSIGNED and REJECTED need an assignment or a reason and go through
        approve() / reject() instead.
        """
        target = cls.validate_transition(report.status, new_status, report.id)
        if target == ReportStatus.ASSIGNED:
            raise ValidationError(
                "Approving a report requires an office assignment",
                report_id=report.id,
                requested=target.value,
            )
        if target == ReportStatus.REJECTED:
            raise ValidationError(
                "A rejection reason is required to reject a report",
                report_id=report.id,
                requested=target.value,
            )
        return report.model_copy(update={"status": target})

    @classmethod
    def attach_maintainer(cls, report: Report, maintainer_id: int) -> Report:
        """
        Attach an external maintainer. Not a status change.

        Raises:
            InvalidTransition: If the report is not ASSIGNED, IN_PROGRESS or SUSPENDED
        """
        if report.status not in MAINTAINER_ATTACHABLE:
            logger.warning(f"Refused maintainer attachment on report {report.id} in {report.status.value}")
            raise InvalidTransition(
                current=report.status.value,
                requested=None,
                report_id=report.id,
                operation="attach_external_maintainer",
                message=(
                    f"Cannot attach an external maintainer to a report in {report.status.value}; "
                    f"allowed in {sorted(s.value for s in MAINTAINER_ATTACHABLE)}"
                ),
            )
        return report.model_copy(update={"external_maintainer_id": maintainer_id})

    @classmethod
    def override(
        cls,
        report: Report,
        status: Optional[StatusLike] = None,
        assigned_office=_UNSET,
        assigned_officer_id=_UNSET,
        external_maintainer_id=_UNSET,
        rejection_reason=_UNSET,
    ) -> Report:
        """
        Administrative override for seed/import tooling.

        Writes the given fields without consulting the transition table.
        Pass None explicitly to clear a field; omitted fields are kept.

        Raises:
            ValidationError: If the result breaks the rejection-reason invariant
        """
        update = {}
        if status is not None:
            update["status"] = cls.parse_status(status)
        if assigned_office is not _UNSET:
            update["assigned_office"] = assigned_office
        if assigned_officer_id is not _UNSET:
            update["assigned_officer_id"] = assigned_officer_id
        if external_maintainer_id is not _UNSET:
            update["external_maintainer_id"] = external_maintainer_id
        if rejection_reason is not _UNSET:
            update["rejection_reason"] = cls.normalize_reason(rejection_reason)

        updated = report.model_copy(update=update)
        cls.check_invariants(updated)
        return updated
