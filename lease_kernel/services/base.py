"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor, session-handling contract and the
    result boundary for every service in the kernel layer.  Concrete
    services receive a SQLAlchemy ``Session`` and use ``session.flush()``;
    they commit only when constructed with ``auto_commit=True``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: without ``auto_commit`` the caller owns
      commit/rollback.  With it, success commits and any failure rolls
      back.
    - Result boundary: ``LeaseKernelError`` raised by the domain rules is
      converted into a ``LeaseResult`` failure and never escapes.
      Infrastructure errors propagate.
    - All validation precedes writes, so a rejected call leaves no
      partial state even inside the caller's transaction.
"""

import logging
import time
from abc import ABC
from typing import Callable, Generic, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from lease_kernel.db.base import Base
from lease_kernel.domain.results import LeaseResult
from lease_kernel.exceptions import LeaseKernelError
from lease_kernel.logging_config import LogContext, get_logger

ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.
    """

    _logger: logging.Logger = get_logger("services")

    def __init__(self, session: Session, auto_commit: bool = False):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            auto_commit: If True, commit after each successful operation
                and roll back after each failed one.
        """
        self.session = session
        self._auto_commit = auto_commit

    def _execute(
        self,
        operation: str,
        fn: Callable[[], T],
        *,
        caller: object | None = None,
        lease_id: int | None = None,
    ) -> LeaseResult[T]:
        """
        Run ``fn`` inside the result boundary.

        Postconditions:
            - Returns ``LeaseResult.success(fn())`` if no rule fired.
            - Returns ``LeaseResult.failure(err)`` for a ``LeaseKernelError``.
            - Re-raises anything else after rollback (auto_commit only).
        """
        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation=operation,
            caller=str(caller) if caller is not None else None,
            lease_id=str(lease_id) if lease_id is not None else None,
        ):
            self._logger.debug(f"{operation}_started")
            t0 = time.monotonic()
            try:
                value = fn()
            except LeaseKernelError as exc:
                if self._auto_commit:
                    self.session.rollback()
                self._logger.info(
                    f"{operation}_rejected",
                    extra={
                        "error_code": exc.code,
                        "error_number": exc.error_number,
                        "reason": str(exc),
                    },
                )
                return LeaseResult.failure(exc)
            except Exception:
                if self._auto_commit:
                    self.session.rollback()
                self._logger.error(f"{operation}_failed", exc_info=True)
                raise

            if self._auto_commit:
                self.session.commit()
            self._logger.info(
                f"{operation}_completed",
                extra={
                    "result": value,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return LeaseResult.success(value)
