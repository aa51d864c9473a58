"""
Event sinks and recipient computation for lifecycle notifications.

The engine publishes; delivery (WebSocket push, e-mail) belongs to the
notification dispatcher consuming these events.
"""

from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Dict, List, Optional
import logging

from participium.core.errors import EventDeliveryError
from participium.models.events import EventKind, LifecycleEvent, Recipient, RecipientRole
from participium.models.report import Report

logger = logging.getLogger(__name__)


class EventSink(ABC):

    @abstractmethod
    def publish(self, event: LifecycleEvent) -> None:
        raise NotImplementedError


class InMemoryEventSink(EventSink):
    """Keeps events in publish order until a consumer drains them."""

    def __init__(self):
        self._events: List[LifecycleEvent] = []
        self._lock = Lock()

    def publish(self, event: LifecycleEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[LifecycleEvent]:
        with self._lock:
            return list(self._events)

    def drain(self) -> List[LifecycleEvent]:
        with self._lock:
            events, self._events = self._events, []
        return events


class LoggingEventSink(EventSink):

    def publish(self, event: LifecycleEvent) -> None:
        keys = ", ".join(r.client_key for r in event.recipients) or "nobody"
        logger.info(f"{event.kind.value} on report {event.report_id} → {keys}")


def publish_committed(sink: EventSink, event: LifecycleEvent, committed: Any) -> None:
    """
    Publish the event for a write that is already stored.

    Raises:
        EventDeliveryError: The sink failed; carries ``committed``
    """
    try:
        sink.publish(event)
    except Exception as e:
        logger.exception(f"{event.kind.value} on report {event.report_id} not delivered after commit")
        raise EventDeliveryError(
            f"Change to report {event.report_id} was stored but {event.kind.value} was not delivered: {e}",
            committed=committed,
            report_id=event.report_id,
            event=event.kind.value,
        ) from e


def _dedupe(recipients: List[Recipient]) -> List[Recipient]:
    seen = set()
    unique = []
    for recipient in recipients:
        if recipient.client_key not in seen:
            seen.add(recipient.client_key)
            unique.append(recipient)
    return unique


def staff_recipients(report: Report, exclude: Optional[Recipient] = None) -> List[Recipient]:
    """Assigned officer and attached maintainer, minus ``exclude``."""
    recipients = []
    if report.assigned_officer_id is not None:
        recipients.append(Recipient(user_id=report.assigned_officer_id, role=RecipientRole.MUNICIPALITY))
    if report.external_maintainer_id is not None:
        recipients.append(Recipient(user_id=report.external_maintainer_id, role=RecipientRole.EXTERNAL_MAINTAINER))
    if exclude is not None:
        recipients = [r for r in recipients if r.client_key != exclude.client_key]
    return _dedupe(recipients)


def status_changed_event(report: Report, previous_status: str) -> LifecycleEvent:
    recipients = []
    if report.user_id is not None:
        recipients.append(Recipient(user_id=report.user_id, role=RecipientRole.CITIZEN))
    recipients.extend(staff_recipients(report))

    payload: Dict[str, Any] = {"from": previous_status, "to": report.status.value}
    if report.rejection_reason:
        payload["rejection_reason"] = report.rejection_reason
    if report.assigned_office:
        payload["assigned_office"] = report.assigned_office
    return LifecycleEvent(
        kind=EventKind.STATUS_CHANGED,
        report_id=report.id,
        recipients=_dedupe(recipients),
        payload=payload,
    )


def maintainer_attached_event(report: Report) -> LifecycleEvent:
    return LifecycleEvent(
        kind=EventKind.MAINTAINER_ATTACHED,
        report_id=report.id,
        recipients=staff_recipients(report),
        payload={"external_maintainer_id": report.external_maintainer_id},
    )
