"""Request and error body schemas for the observability routes."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ai_observability_core.exceptions import FieldError


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreTarget(_Body):
    trace_id: str
    span_id: str | None = None


class ScoreTracesBody(_Body):
    scorer_name: str
    targets: list[ScoreTarget] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    field: str
    message: str

    @classmethod
    def from_field_error(cls, error: FieldError) -> "ErrorDetail":
        return cls(field=error.field, message=error.message)


class ErrorResponse(BaseModel):
    """Body of every non-2xx response. ``details`` lists every violated field on 400s."""

    error: str
    details: list[ErrorDetail] | None = None
