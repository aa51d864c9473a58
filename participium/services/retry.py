"""
Caller-side retry for optimistic write conflicts.

Only ConflictError is retried. The operation must re-read the report on
each attempt so the transition table is re-checked against fresh state.
"""

from typing import Callable, Optional, TypeVar
import logging

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from participium.core.errors import ConflictError
from participium.core.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_conflict(retry_state: RetryCallState) -> None:
    logger.warning(
        f"Write conflict (attempt {retry_state.attempt_number}), retrying: "
        f"{retry_state.outcome.exception()}"
    )


def retry_on_conflict(operation: Callable[[], T], attempts: Optional[int] = None) -> T:
    """
    Run ``operation`` until it stops raising ConflictError.

    Usage:
        retry_on_conflict(lambda: lifecycle.approve(report_id))

    Raises:
        ConflictError: The last conflict, once attempts are exhausted
        ValueError: If attempts < 1
    """
    attempts = settings.CONFLICT_RETRY_ATTEMPTS if attempts is None else attempts
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    retrying = Retrying(
        retry=retry_if_exception_type(ConflictError),
        stop=stop_after_attempt(attempts),
        before_sleep=_log_conflict,
        reraise=True,
    )
    return retrying(operation)
