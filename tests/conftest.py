"""Shared fixtures: in-memory stores wired into the lifecycle services."""

import pytest

from participium.models.office import OfficeRouting
from participium.repositories.memory import (
    InMemoryCommentLedgerStore,
    InMemoryOfficeDirectory,
    InMemoryReportStore,
)
from participium.services.assignment_resolver import AssignmentResolver
from participium.services.comment_service import CommentService
from participium.services.events import InMemoryEventSink
from participium.services.lifecycle_service import ReportLifecycleService

from helpers import ADMIN_OFFICE, PUBLIC_WORKS, WASTE_OFFICE


@pytest.fixture
def routing() -> OfficeRouting:
    return OfficeRouting.default()


@pytest.fixture
def store() -> InMemoryReportStore:
    return InMemoryReportStore()


@pytest.fixture
def directory(routing: OfficeRouting) -> InMemoryOfficeDirectory:
    return InMemoryOfficeDirectory(routing, {
        WASTE_OFFICE: [11, 12],
        PUBLIC_WORKS: [21],
        ADMIN_OFFICE: [1],
    })


@pytest.fixture
def ledger_store() -> InMemoryCommentLedgerStore:
    return InMemoryCommentLedgerStore()


@pytest.fixture
def events() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def resolver(directory, store) -> AssignmentResolver:
    return AssignmentResolver(directory, store)


@pytest.fixture
def lifecycle(store, resolver, events) -> ReportLifecycleService:
    return ReportLifecycleService(store, resolver, events)


@pytest.fixture
def comments(store, ledger_store, events) -> CommentService:
    return CommentService(store, ledger_store, events, max_length=200)

