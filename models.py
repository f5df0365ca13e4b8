"""
Pydantic models for the lazy sequence service.

Request and response shapes for evaluating declarative pipelines.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum

from utils import DEFAULT_EVALUATION_LIMIT, MAX_EVALUATION_LIMIT


class OperationType(str, Enum):
    """Combinators a pipeline operation may name"""
    MAP = "map"
    TOUCH = "touch"
    SELECT = "select"
    REJECT = "reject"
    START_WHEN = "start_when"
    START_AFTER = "start_after"
    DO_WHILE = "do_while"
    DO_UNTIL = "do_until"
    STOP_BEFORE = "stop_before"
    STOP_WHEN = "stop_when"
    SKIP = "skip"
    TAKE = "take"
    CONS = "cons"
    WEAVE = "weave"
    DIAGONALIZE = "diagonalize"
    RANDOMLY = "randomly"
    LTRANSPOSE = "ltranspose"
    CYCLE = "cycle"
    REPEAT = "repeat"


class SourceSpec(BaseModel):
    """Where a pipeline pulls from: literal items or a named generator"""
    items: Optional[List[Any]] = Field(
        None,
        description="Literal elements of a finite source"
    )
    generator: Optional[str] = Field(
        None,
        description="Name of a registered generator",
        examples=["positives"]
    )

    @model_validator(mode="after")
    def validate_exactly_one(self):
        """Exactly one of items / generator must be given"""
        if (self.items is None) == (self.generator is None):
            raise ValueError("Provide exactly one of 'items' or 'generator'")
        return self

    def resolve(self):
        return self.generator if self.generator is not None else self.items


class OperationSpec(BaseModel):
    """One step of a pipeline"""
    type: OperationType = Field(..., description="Combinator to apply")
    function: Optional[str] = Field(None, description="Named transform (map) or side effect (touch)")
    predicate: Optional[str] = Field(None, description="Named predicate for filtering and boundaries")
    value: Optional[float] = Field(None, description="Argument bound into the named function")
    count: Optional[float] = Field(None, description="Count for skip, take and repeat")
    size: Optional[int] = Field(None, ge=1, description="Pool size for randomly")
    seed: Optional[int] = Field(None, description="Random seed for randomly")

    @field_validator("value", "count")
    @classmethod
    def integral_when_whole(cls, v):
        """Keep whole numbers as ints so integer sources stay integers"""
        if v is not None and float(v).is_integer():
            return int(v)
        return v

    def to_operation(self) -> Dict[str, Any]:
        op = self.model_dump(exclude_none=True)
        op["type"] = self.type.value
        return op


class PipelineRequest(BaseModel):
    """Request to evaluate a pipeline"""
    source: SourceSpec
    operations: List[OperationSpec] = Field(default_factory=list)
    limit: int = Field(
        DEFAULT_EVALUATION_LIMIT,
        ge=0,
        le=MAX_EVALUATION_LIMIT,
        description="Maximum number of elements to pull"
    )


class PerformanceInfo(BaseModel):
    processing_time_ms: float
    memory_usage_mb: float
    limit: int
    operation: str


class PipelineResponse(BaseModel):
    """Evaluated prefix of a pipeline"""
    items: List[Any]
    count: int
    has_more: Optional[bool] = Field(
        ...,
        description="False when the source ran out before the limit; null when the limit was reached"
    )
    operations_applied: List[str]
    performance: PerformanceInfo
    timestamp: datetime = Field(default_factory=datetime.now)


class GeneratorPrefixResponse(BaseModel):
    name: str
    items: List[Any]
    count: int
    execution_time_ms: float
    timestamp: datetime = Field(default_factory=datetime.now)


class RegistryResponse(BaseModel):
    """Names a pipeline may refer to"""
    generators: List[str]
    transforms: List[str]
    predicates: List[str]
    side_effects: List[str]
    operations: List[str]


class StatusResponse(BaseModel):
    ok: bool
    message: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    error_type: str
    timestamp: datetime
