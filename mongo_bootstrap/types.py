from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, Field


class IndexKind(str, Enum):
    """Kinds of secondary index the reconcilers know how to converge"""

    standard = "standard"
    text = "text"
    ttl = "ttl"


class Outcome(str, Enum):
    """Result of a single reconciliation routine

    ``ok`` and ``recovered`` count as success. ``recovered`` means an error
    happened, was logged and deliberately not escalated. ``failed`` means the
    routine reported failure, ``fatal`` means it raised.
    """

    ok = "ok"
    recovered = "recovered"
    failed = "failed"
    fatal = "fatal"


class RoutineResult(NamedTuple):
    """Outcome of one routine in an initialization pass"""

    name: str
    outcome: Outcome
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (Outcome.ok, Outcome.recovered)

    @classmethod
    def ok(cls, name: str) -> "RoutineResult":
        return cls(name, Outcome.ok)

    @classmethod
    def recovered(cls, name: str, error: BaseException) -> "RoutineResult":
        return cls(name, Outcome.recovered, error)

    @classmethod
    def failed(
        cls, name: str, error: BaseException | None = None
    ) -> "RoutineResult":
        return cls(name, Outcome.failed, error)

    @classmethod
    def fatal(cls, name: str, error: BaseException) -> "RoutineResult":
        return cls(name, Outcome.fatal, error)


class IndexSpec(BaseModel):
    """Desired shape of a standard secondary index"""

    name: str = Field(description="Index name as stored by the server")
    keys: list[tuple[str, int]] = Field(
        description="Ordered (field, direction) pairs"
    )
    unique: bool = Field(default=False, description="Unique constraint")
    sparse: bool = Field(default=False, description="Skip missing fields")

    @property
    def kind(self) -> IndexKind:
        return IndexKind.standard

    def options(self) -> dict[str, Any]:
        """Driver keyword arguments for ``create_index``"""
        opts: dict[str, Any] = {"name": self.name}
        if self.unique:
            opts["unique"] = True
        if self.sparse:
            opts["sparse"] = True
        return opts


class TextIndexSpec(BaseModel):
    """Desired text index over a single field"""

    field: str = Field(description="Field indexed for full-text search")
    name: str = Field(description="Index name as stored by the server")

    @property
    def kind(self) -> IndexKind:
        return IndexKind.text


class TTLIndexSpec(BaseModel):
    """Desired TTL index that expires documents after a fixed delay"""

    field: str = Field(description="Date field the expiry is measured from")
    expire_after_seconds: int = Field(
        ge=0, description="Seconds after which documents expire"
    )
    name: str | None = Field(
        default=None, description="Index name, defaults to '<field>_1'"
    )

    @property
    def kind(self) -> IndexKind:
        return IndexKind.ttl

    @property
    def index_name(self) -> str:
        return self.name or f"{self.field}_1"
