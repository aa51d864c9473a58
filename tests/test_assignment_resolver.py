"""Tests for office routing and least-loaded officer selection."""

import pytest

from participium.core.errors import ConfigurationError
from participium.models.office import OfficeRouting
from participium.models.report import Category, ReportStatus
from participium.repositories.memory import InMemoryOfficeDirectory, InMemoryReportStore
from participium.services.assignment_resolver import AssignmentResolver
from participium.services.status_workflow import StatusWorkflowEngine

from helpers import ADMIN_OFFICE, PUBLIC_WORKS, WASTE_OFFICE, submit


def _assign(store, category, office, officer_id, status=ReportStatus.ASSIGNED):
    report = submit(store, category)
    fields = dict(status=status, assigned_office=office, assigned_officer_id=officer_id)
    if status == ReportStatus.REJECTED:
        fields["rejection_reason"] = "duplicate"
    return store.save(StatusWorkflowEngine.override(report, **fields))


class TestOfficeRouting:
    def test_waste_goes_to_sanitation(self, resolver) -> None:
        assert resolver.office_for(Category.WASTE) == WASTE_OFFICE

    def test_lighting_goes_to_public_works(self, resolver) -> None:
        assert resolver.office_for(Category.PUBLIC_LIGHTING) == PUBLIC_WORKS

    def test_other_goes_to_fallback(self, resolver) -> None:
        assert resolver.office_for(Category.OTHER) == ADMIN_OFFICE

    def test_string_category_accepted(self, resolver) -> None:
        assert resolver.office_for("WASTE") == WASTE_OFFICE

    def test_unknown_category_is_programming_error(self, resolver) -> None:
        with pytest.raises(ValueError):
            resolver.office_for("GRAFFITI")

    def test_custom_routing_falls_back_for_missing_categories(self, store) -> None:
        routing = OfficeRouting(offices={Category.WASTE: "waste desk"}, fallback_office="front desk")
        directory = InMemoryOfficeDirectory(routing, {"front desk": [3]})
        resolver = AssignmentResolver(directory, store)
        assert resolver.office_for(Category.WASTE) == "waste desk"
        assert resolver.office_for(Category.SEWER_SYSTEM) == "front desk"
        assert resolver.resolve(Category.SEWER_SYSTEM).officer_id == 3


class TestLeastLoaded:
    def test_tie_goes_to_lowest_id(self, resolver) -> None:
        assignment = resolver.resolve(Category.WASTE)
        assert assignment.office == WASTE_OFFICE
        assert assignment.officer_id == 11
        assert assignment.open_reports == 0

    def test_picks_officer_with_fewest_open_reports(self, store, resolver) -> None:
        _assign(store, Category.WASTE, WASTE_OFFICE, 11)
        _assign(store, Category.WASTE, WASTE_OFFICE, 11, ReportStatus.IN_PROGRESS)
        _assign(store, Category.WASTE, WASTE_OFFICE, 12)
        assignment = resolver.resolve(Category.WASTE)
        assert assignment.officer_id == 12
        assert assignment.open_reports == 1

    def test_terminal_reports_do_not_count(self, store, resolver) -> None:
        _assign(store, Category.WASTE, WASTE_OFFICE, 11, ReportStatus.RESOLVED)
        _assign(store, Category.WASTE, WASTE_OFFICE, 11, ReportStatus.RESOLVED)
        _assign(store, Category.WASTE, WASTE_OFFICE, 12, ReportStatus.SUSPENDED)
        assert resolver.resolve(Category.WASTE).officer_id == 11

    def test_rejected_reports_do_not_count(self, store, resolver) -> None:
        _assign(store, Category.WASTE, WASTE_OFFICE, 11, ReportStatus.REJECTED)
        assert resolver.open_workload(WASTE_OFFICE) == {11: 0, 12: 0}

    def test_reports_of_former_officers_are_ignored(self, store, resolver) -> None:
        _assign(store, Category.WASTE, WASTE_OFFICE, 99)
        assert resolver.open_workload(WASTE_OFFICE) == {11: 0, 12: 0}

    def test_resolve_has_no_side_effects(self, store, resolver) -> None:
        report = submit(store)
        resolver.resolve(Category.WASTE)
        assert store.get(report.id) == report


class TestConfigurationErrors:
    def test_office_without_officers(self, routing) -> None:
        store = InMemoryReportStore()
        resolver = AssignmentResolver(InMemoryOfficeDirectory(routing), store)
        with pytest.raises(ConfigurationError) as exc:
            resolver.resolve(Category.WASTE)
        assert exc.value.details["office"] == WASTE_OFFICE
