"""Page and subject models for activity pagination."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.enums import PageSource, SubjectKind
from .activity import ActivityRecord


class Subject(BaseModel):
    """Whose activity a page is about."""

    kind: SubjectKind
    address: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def validate_address(self) -> Subject:
        if self.kind != SubjectKind.GLOBAL and not self.address:
            raise ValueError(f"{self.kind.value} subject requires an address")
        return self

    @classmethod
    def dao(cls, address: str) -> Subject:
        return cls(kind=SubjectKind.DAO, address=address)

    @classmethod
    def user(cls, address: str) -> Subject:
        return cls(kind=SubjectKind.USER, address=address)

    @classmethod
    def everyone(cls) -> Subject:
        return cls(kind=SubjectKind.GLOBAL)

    def matches(self, record: ActivityRecord) -> bool:
        """Whether ``record`` belongs in this subject's feed."""
        if self.kind == SubjectKind.GLOBAL:
            return True
        if not self.address:
            return False
        address = self.address.lower()
        if self.kind == SubjectKind.DAO:
            return record.dao_address.lower() == address
        return record.subject_address.lower() == address


class Page(BaseModel):
    """One page of activity records, newest first.

    A Page is a derived view and is never cached; only the count, id-list and
    per-record reads behind it are.
    """

    items: list[ActivityRecord] = Field(default_factory=list)
    page_index: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_items: int = Field(default=0, ge=0)
    has_next: bool = False
    has_prev: bool = False
    source: PageSource = PageSource.EMPTY

    model_config = ConfigDict(frozen=True)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.total_items else 0

    @property
    def ids(self) -> list[int | None]:
        return [record.id for record in self.items]
