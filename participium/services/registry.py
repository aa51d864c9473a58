"""
Service Registry - wires stores, routing and services from settings.

- USE_MOCK_DB=true: in-memory stores (local development, demos)
- otherwise: Firestore stores on the shared client
"""

from typing import Optional
import logging

from participium.core.settings import Settings, settings
from participium.models.office import OfficeRouting
from participium.repositories.base import CommentLedgerStore, OfficeDirectory, ReportStore
from participium.services.assignment_resolver import AssignmentResolver
from participium.services.comment_service import CommentService
from participium.services.events import EventSink, LoggingEventSink
from participium.services.lifecycle_service import ReportLifecycleService

logger = logging.getLogger(__name__)


def load_routing(config: Settings) -> OfficeRouting:
    if config.OFFICE_ROUTING_PATH:
        routing = OfficeRouting.from_json_file(config.OFFICE_ROUTING_PATH)
        logger.info(f"Office routing loaded from {config.OFFICE_ROUTING_PATH}")
        return routing
    return OfficeRouting.default()


class ServiceRegistry:
    """
    Holds one instance of each collaborator and the services built on them.
    """

    def __init__(self, config: Settings, events: Optional[EventSink] = None):
        self.config = config
        self.routing = load_routing(config)
        self.events = events or LoggingEventSink()
        self.report_store: ReportStore
        self.directory: OfficeDirectory
        self.ledger_store: CommentLedgerStore
        self._initialize_stores()

        self.resolver = AssignmentResolver(self.directory, self.report_store)
        self.lifecycle = ReportLifecycleService(self.report_store, self.resolver, self.events)
        self.comments = CommentService(
            self.report_store,
            self.ledger_store,
            self.events,
            max_length=config.COMMENT_MAX_LENGTH,
        )

    def _initialize_stores(self):
        if self.config.USE_MOCK_DB:
            from participium.repositories.memory import (
                InMemoryCommentLedgerStore,
                InMemoryOfficeDirectory,
                InMemoryReportStore,
            )
            self.report_store = InMemoryReportStore()
            self.directory = InMemoryOfficeDirectory(self.routing)
            self.ledger_store = InMemoryCommentLedgerStore()
            logger.info("Using in-memory stores (USE_MOCK_DB=true)")
            return

        from participium.config.firebase import get_db
        from participium.repositories.firestore import (
            FirestoreCommentLedgerStore,
            FirestoreOfficeDirectory,
            FirestoreReportStore,
        )
        db = get_db()
        self.report_store = FirestoreReportStore(db)
        self.directory = FirestoreOfficeDirectory(self.routing, db)
        self.ledger_store = FirestoreCommentLedgerStore(db)
        logger.info("Using Firestore stores")


# Global registry instance (singleton)
_registry: Optional[ServiceRegistry] = None


def get_registry() -> ServiceRegistry:
    global _registry
    if _registry is None:
        _registry = ServiceRegistry(settings)
    return _registry


def get_lifecycle_service() -> ReportLifecycleService:
    return get_registry().lifecycle


def get_comment_service() -> CommentService:
    return get_registry().comments


def reset_registry() -> None:
    """Drop the cached registry so the next call re-reads settings."""
    global _registry
    _registry = None
