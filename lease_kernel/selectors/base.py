"""
Module: lease_kernel.selectors.base
Responsibility: shared plumbing for the read side of the registry store.
Architecture position: Kernel > Selectors.  May import db/, models/ and
    domain DTOs; never services/.

Selectors never add, delete, flush or commit.  They hand back frozen DTOs
(or plain ids), not ORM instances, and leave the transaction to the caller.
"""

from abc import ABC
from typing import Any, Callable, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.orm import Session

from lease_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
RowT = TypeVar("RowT", bound=Base)
DtoT = TypeVar("DtoT")


class BaseSelector(ABC, Generic[ModelType]):
    """Read-only query object over a caller-owned session."""

    def __init__(self, session: Session):
        self.session = session

    def _get_as(
        self,
        model: type[RowT],
        key: Any,
        convert: Callable[[RowT], DtoT],
    ) -> DtoT | None:
        """Primary-key lookup converted to a DTO; None when the row is absent."""
        row = self.session.get(model, key)
        return convert(row) if row is not None else None

    def _scalar_tuple(self, stmt: Select) -> tuple[Any, ...]:
        return tuple(self.session.execute(stmt).scalars().all())
