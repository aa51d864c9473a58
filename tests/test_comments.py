"""Tests for the comment guard, the collaboration ledger and the comment service."""

from datetime import datetime, timedelta

import pytest

from participium.core.errors import EventDeliveryError, Forbidden, NotFound, ValidationError
from participium.core.settings import settings
from participium.models.comment import AuthorType, Comment
from participium.models.events import EventKind
from participium.models.report import ReportStatus
from participium.services.collaboration_ledger import CollaborationLedger
from participium.services.comment_guard import CommentAuthorizationGuard, parse_author_type
from participium.services.comment_service import CommentService
from participium.services.events import EventSink

from helpers import submit


@pytest.fixture
def in_progress(store, lifecycle):
    report = submit(store)
    lifecycle.approve(report.id)
    return lifecycle.change_status(report.id, "IN_PROGRESS")


@pytest.fixture
def with_maintainer(store, lifecycle, in_progress):
    return lifecycle.attach_external_maintainer(in_progress.id, 5)


def _resolve(lifecycle, report_id):
    return lifecycle.change_status(report_id, "RESOLVED")


class TestAuthorType:
    def test_enum_and_strings(self) -> None:
        assert parse_author_type(AuthorType.MUNICIPALITY) == AuthorType.MUNICIPALITY
        assert parse_author_type("EXTERNAL_MAINTAINER") == AuthorType.EXTERNAL_MAINTAINER

    @pytest.mark.parametrize("value", ["CITIZEN", "ADMIN", "", None, "municipality"])
    def test_everything_else_is_validation_error(self, value) -> None:
        with pytest.raises(ValidationError):
            parse_author_type(value)


class TestGuard:
    def test_unknown_report(self, store) -> None:
        with pytest.raises(NotFound):
            CommentAuthorizationGuard(store).authorize(404, 11, AuthorType.MUNICIPALITY, "hi")

    def test_municipality_on_unassigned_report(self, store, in_progress) -> None:
        comment = CommentAuthorizationGuard(store).authorize(in_progress.id, 99, "MUNICIPALITY", "on my way")
        assert comment.municipality_user_id == 99
        assert comment.external_maintainer_id is None

    def test_municipality_on_pending_report(self, store) -> None:
        report = submit(store)
        comment = CommentAuthorizationGuard(store).authorize(report.id, 1, AuthorType.MUNICIPALITY, "checking")
        assert comment.author_type == AuthorType.MUNICIPALITY

    def test_attached_maintainer_allowed(self, store, with_maintainer) -> None:
        comment = CommentAuthorizationGuard(store).authorize(
            with_maintainer.id, 5, AuthorType.EXTERNAL_MAINTAINER, "crew dispatched"
        )
        assert comment.external_maintainer_id == 5
        assert comment.municipality_user_id is None

    def test_other_maintainer_forbidden(self, store, with_maintainer) -> None:
        with pytest.raises(Forbidden) as exc:
            CommentAuthorizationGuard(store).authorize(with_maintainer.id, 3, AuthorType.EXTERNAL_MAINTAINER, "hi")
        assert exc.value.details["actor_id"] == 3

    def test_maintainer_forbidden_when_nobody_attached(self, store, in_progress) -> None:
        with pytest.raises(Forbidden):
            CommentAuthorizationGuard(store).authorize(in_progress.id, 5, AuthorType.EXTERNAL_MAINTAINER, "hi")

    def test_citizen_is_validation_error(self, store, in_progress) -> None:
        with pytest.raises(ValidationError):
            CommentAuthorizationGuard(store).authorize(in_progress.id, 7, "CITIZEN", "hello?")

    def test_resolved_blocks_everybody_first(self, store, lifecycle, with_maintainer) -> None:
        _resolve(lifecycle, with_maintainer.id)
        guard = CommentAuthorizationGuard(store)
        for author_id, author_type in [(11, "MUNICIPALITY"), (5, "EXTERNAL_MAINTAINER"), (7, "CITIZEN")]:
            with pytest.raises(Forbidden):
                guard.authorize(with_maintainer.id, author_id, author_type, "late")

    def test_rejected_report_is_still_discussable(self, store, lifecycle) -> None:
        report = submit(store)
        lifecycle.reject(report.id, "duplicate")
        comment = CommentAuthorizationGuard(store).authorize(report.id, 11, AuthorType.MUNICIPALITY, "merged into #3")
        assert comment.content == "merged into #3"

    def test_empty_content(self, store, in_progress) -> None:
        with pytest.raises(ValidationError):
            CommentAuthorizationGuard(store).authorize(in_progress.id, 11, AuthorType.MUNICIPALITY, "   ")

    def test_missing_author_id(self, store, in_progress) -> None:
        with pytest.raises(ValidationError):
            CommentAuthorizationGuard(store).authorize(in_progress.id, None, AuthorType.EXTERNAL_MAINTAINER, "x")


class TestCommentModel:
    def test_exactly_one_author(self) -> None:
        with pytest.raises(ValueError):
            Comment(report_id=1, content="x", municipality_user_id=1, external_maintainer_id=2)
        with pytest.raises(ValueError):
            Comment(report_id=1, content="x")

    def test_both_author_keys_are_dumped(self) -> None:
        dumped = Comment.authored_by(1, AuthorType.EXTERNAL_MAINTAINER, 5, "x").model_dump()
        assert dumped["external_maintainer_id"] == 5
        assert "municipality_user_id" in dumped
        assert dumped["municipality_user_id"] is None


class TestLedger:
    def test_n_appends_come_back_in_creation_order(self, ledger_store) -> None:
        ledger = CollaborationLedger(ledger_store)
        for i in range(5):
            ledger.append(Comment.authored_by(1, AuthorType.MUNICIPALITY, 11, f"note {i}"))
        ledger.append(Comment.authored_by(2, AuthorType.MUNICIPALITY, 11, "other report"))

        listed = ledger.list(1)
        assert [c.content for c in listed] == [f"note {i}" for i in range(5)]
        assert [c.id for c in listed] == sorted(c.id for c in listed)
        assert ledger.count(2) == 1
        assert ledger.list(3) == []

    def test_explicit_timestamps_are_ordered(self, ledger_store) -> None:
        ledger = CollaborationLedger(ledger_store)
        now = datetime.utcnow()
        late = Comment.authored_by(1, AuthorType.MUNICIPALITY, 11, "late")
        early = Comment.authored_by(1, AuthorType.MUNICIPALITY, 11, "early")
        ledger.append(late.model_copy(update={"created_at": now}))
        ledger.append(early.model_copy(update={"created_at": now - timedelta(hours=1)}))
        assert [c.content for c in ledger.list(1)] == ["early", "late"]

    def test_append_assigns_id_and_timestamps(self, ledger_store) -> None:
        stored = CollaborationLedger(ledger_store).append(Comment.authored_by(1, AuthorType.MUNICIPALITY, 11, "x"))
        assert stored.id is not None
        assert stored.created_at is not None
        assert stored.updated_at is not None


class TestCommentService:
    def test_officer_comments_on_unmaintained_report(self, comments, in_progress) -> None:
        comment = comments.add_comment(in_progress.id, 11, AuthorType.MUNICIPALITY, "  needs a crew ")
        assert comment.content == "needs a crew"
        assert comment.municipality_user_id == 11
        assert comment.external_maintainer_id is None

    def test_bidirectional_channel(self, comments, with_maintainer) -> None:
        comments.add_comment(with_maintainer.id, 11, AuthorType.MUNICIPALITY, "please check")
        comments.add_comment(with_maintainer.id, 5, AuthorType.EXTERNAL_MAINTAINER, "done tomorrow")
        listed = comments.get_comments(with_maintainer.id)
        assert [c.author_type for c in listed] == [AuthorType.MUNICIPALITY, AuthorType.EXTERNAL_MAINTAINER]
        for c in listed:
            assert (c.municipality_user_id is None) != (c.external_maintainer_id is None)

    def test_wrong_maintainer_leaves_ledger_unchanged(self, comments, with_maintainer) -> None:
        comments.add_comment(with_maintainer.id, 11, AuthorType.MUNICIPALITY, "first")
        with pytest.raises(Forbidden):
            comments.add_comment(with_maintainer.id, 3, AuthorType.EXTERNAL_MAINTAINER, "intruding")
        assert len(comments.get_comments(with_maintainer.id)) == 1

    def test_resolved_report_leaves_ledger_unchanged(self, comments, lifecycle, with_maintainer) -> None:
        comments.add_comment(with_maintainer.id, 5, AuthorType.EXTERNAL_MAINTAINER, "fixed")
        _resolve(lifecycle, with_maintainer.id)
        with pytest.raises(Forbidden):
            comments.add_comment(with_maintainer.id, 11, AuthorType.MUNICIPALITY, "thanks")
        with pytest.raises(Forbidden):
            comments.add_comment(with_maintainer.id, 5, AuthorType.EXTERNAL_MAINTAINER, "bye")
        assert len(comments.get_comments(with_maintainer.id)) == 1

    def test_too_long_content(self, comments, in_progress) -> None:
        with pytest.raises(ValidationError):
            comments.add_comment(in_progress.id, 11, AuthorType.MUNICIPALITY, "x" * 201)
        assert comments.get_comments(in_progress.id) == []

    def test_get_comments_unknown_report(self, comments) -> None:
        with pytest.raises(NotFound):
            comments.get_comments(404)

    def test_comment_event_skips_author(self, comments, events, with_maintainer) -> None:
        events.drain()
        comments.add_comment(with_maintainer.id, 5, AuthorType.EXTERNAL_MAINTAINER, "on site")
        [event] = events.drain()
        assert event.kind == EventKind.COMMENT_ADDED
        assert [r.client_key for r in event.recipients] == ["MUNICIPALITY:11"]
        assert event.payload["comment"]["municipality_user_id"] is None

    def test_comment_by_unassigned_officer_reaches_assigned_one(self, comments, events, with_maintainer) -> None:
        events.drain()
        comments.add_comment(with_maintainer.id, 12, AuthorType.MUNICIPALITY, "fyi")
        [event] = events.drain()
        assert [r.client_key for r in event.recipients] == ["MUNICIPALITY:11", "EXTERNAL_MAINTAINER:5"]

    def test_report_status_is_not_touched(self, store, comments, in_progress) -> None:
        comments.add_comment(in_progress.id, 11, AuthorType.MUNICIPALITY, "x")
        assert store.get(in_progress.id).status == ReportStatus.IN_PROGRESS

    def test_explicit_zero_limit_is_kept(self, store, ledger_store, events, in_progress) -> None:
        service = CommentService(store, ledger_store, events, max_length=0)
        assert service.max_length == 0
        with pytest.raises(ValidationError):
            service.add_comment(in_progress.id, 11, AuthorType.MUNICIPALITY, "x")

    def test_default_limit_comes_from_settings(self, store, ledger_store, events) -> None:
        assert CommentService(store, ledger_store, events).max_length == settings.COMMENT_MAX_LENGTH

    def test_sink_failure_keeps_the_comment(self, store, ledger_store, in_progress) -> None:
        class _UnreachableSink(EventSink):
            def publish(self, event) -> None:
                raise RuntimeError("socket closed")

        service = CommentService(store, ledger_store, _UnreachableSink())
        with pytest.raises(EventDeliveryError) as exc:
            service.add_comment(in_progress.id, 11, AuthorType.MUNICIPALITY, "crew booked")

        assert exc.value.committed.content == "crew booked"
        assert [c.id for c in service.get_comments(in_progress.id)] == [exc.value.committed.id]
