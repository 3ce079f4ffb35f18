"""Lookup data models: envelopes, source specs and dispatch outcomes."""
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING
from urllib.parse import quote
from pydantic import BaseModel, Field, model_validator
from cepfinder.core.enums import OutcomeKind

if TYPE_CHECKING:
    from cepfinder.lookup.deadline import Deadline


class ResultEnvelope(BaseModel):
    """
    Normalized result produced by one upstream source.

    Exactly one of ``data`` (success) or ``error`` (failure) carries content.
    Both fields are always serialized.
    """

    source: str = Field(..., min_length=1, description="Upstream that produced this envelope")
    data: Optional[Dict[str, Any]] = Field(None, description="Decoded upstream payload")
    error: str = Field("", description="Failure description")

    @model_validator(mode="after")
    def check_single_outcome(self) -> "ResultEnvelope":
        has_data = self.data is not None
        has_error = bool(self.error)
        if has_data == has_error:
            raise ValueError("envelope must carry either data or an error")
        return self

    @classmethod
    def success(cls, source: str, data: Dict[str, Any]) -> "ResultEnvelope":
        return cls(source=source, data=data)

    @classmethod
    def failure(cls, source: str, error: str) -> "ResultEnvelope":
        # Exceptions with an empty message still need a non-empty description
        return cls(source=source, error=error or "unknown error")

    @property
    def ok(self) -> bool:
        """Whether the envelope carries upstream data."""
        return self.data is not None

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.SUCCESS if self.ok else OutcomeKind.FAILURE


@dataclass(frozen=True)
class SourceSpec:
    """
    Static configuration for one upstream source.

    ``endpoint`` is a URL template with a ``{cep}`` placeholder.
    """

    name: str
    endpoint: str

    def build_url(self, cep: str) -> str:
        return self.endpoint.format(cep=quote(cep, safe=""))


@dataclass
class UpstreamRequest:
    """A fully-formed request for one upstream call."""

    method: str
    url: str
    deadline: "Deadline"


@dataclass
class UpstreamResponse:
    """Raw status and body returned by an upstream call."""

    status_code: int
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class DispatchOutcome:
    """
    Resolution of one dispatch.

    Holds the winning envelope, or ``deadline_exceeded`` when no source
    delivered before the shared deadline.
    """

    envelope: Optional[ResultEnvelope] = None
    deadline_exceeded: bool = False
    elapsed: float = 0.0

    @property
    def kind(self) -> OutcomeKind:
        if self.deadline_exceeded:
            return OutcomeKind.TIMEOUT
        return self.envelope.kind
