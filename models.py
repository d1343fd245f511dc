"""
Pydantic Models

Argument, configuration and pipeline models for the lazy sequence library.
"""

import math
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Number = Union[StrictInt, StrictFloat]

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class LazySettings(BaseSettings):
    """Library-wide settings, overridable through LAZY_* environment variables"""
    model_config = SettingsConfigDict(
        env_prefix="LAZY_",
        case_sensitive=False,
        extra="ignore",
    )

    repr_limit: int = Field(
        10,
        description="Maximum number of elements shown when printing a sequence",
        ge=1
    )
    log_level: str = Field(
        "WARNING",
        description="Level used by setup_logging()"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Accept standard logging level names in any case"""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


class GenerateArgs(BaseModel):
    """Arguments of generate()"""
    model_config = ConfigDict(frozen=True)

    fn: Callable[[int], Any] = Field(..., description="Index-to-value function")
    length: Optional[StrictInt] = Field(
        None,
        description="Number of elements; None means unbounded",
        ge=0
    )


class RangeArgs(BaseModel):
    """Arguments of range()"""
    model_config = ConfigDict(frozen=True)

    start: Number = Field(0, description="First value")
    stop: Number = Field(..., description="Exclusive bound")
    step: Number = Field(1, description="Distance between values")

    @field_validator('start', 'stop', 'step', mode='before')
    @classmethod
    def validate_not_bool(cls, v):
        """Booleans are not numbers here"""
        if isinstance(v, bool):
            raise ValueError("range bounds must be numbers, not booleans")
        return v

    @field_validator('start', 'stop', 'step')
    @classmethod
    def validate_finite(cls, v):
        """Reject infinities and NaN"""
        if not math.isfinite(v):
            raise ValueError("range bounds must be finite numbers")
        return v

    @classmethod
    def from_positional(cls, *args) -> "RangeArgs":
        """Map range(stop) / range(start, stop) / range(start, stop, step)"""
        if len(args) == 1:
            return cls(stop=args[0])
        if len(args) == 2:
            return cls(start=args[0], stop=args[1])
        if len(args) == 3:
            return cls(start=args[0], stop=args[1], step=args[2])
        raise ValueError(f"range takes 1-3 arguments, got {len(args)}")

    def length(self) -> int:
        """Element count; zero when stop cannot be reached from start"""
        if self.step == 0:
            return 0
        return max(0, math.floor((self.stop - self.start) / self.step))


class OperationType(str, Enum):
    """Operations available to declarative pipelines"""
    MAP = "map"
    FILTER = "filter"
    REJECT = "reject"
    TAKE = "take"
    SKIP = "skip"
    UNIQ = "uniq"
    FLATTEN = "flatten"
    SORT_BY = "sort_by"
    CHUNK = "chunk"


class OperationSpec(BaseModel):
    """One step of a declarative pipeline"""
    type: OperationType = Field(..., description="Operation to apply")
    function: Optional[Callable[..., Any]] = Field(
        None,
        description="Mapper, predicate or key function"
    )
    count: Optional[int] = Field(
        None,
        description="Element count for take/skip",
        ge=0
    )
    size: Optional[int] = Field(
        None,
        description="Chunk size",
        ge=1
    )

    @model_validator(mode='after')
    def validate_arguments(self):
        """Each operation type needs its own argument"""
        if self.type in (OperationType.MAP, OperationType.FILTER, OperationType.REJECT):
            if self.function is None:
                raise ValueError(f"{self.type.value} requires a function")
        elif self.type in (OperationType.TAKE, OperationType.SKIP):
            if self.count is None:
                raise ValueError(f"{self.type.value} requires a count")
        elif self.type == OperationType.CHUNK:
            if self.size is None:
                raise ValueError("chunk requires a size")
        return self


class PipelineRequest(BaseModel):
    """Source data plus the operations to run over it"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: Any = Field(..., description="List, string, mapping or sequence to wrap")
    operations: List[OperationSpec] = Field(
        default_factory=list,
        description="Operations applied in order"
    )
    limit: Optional[int] = Field(
        None,
        description="Stop after this many output elements",
        ge=0
    )


class PipelineResult(BaseModel):
    """Materialized pipeline output"""
    result: List[Any] = Field(..., description="Output elements")
    operations_applied: List[str] = Field(..., description="Operation names in order")
    source_kind: str = Field(..., description="Sequence variant chosen for the source")
    output_size: int = Field(..., description="Number of output elements", ge=0)
    processing_time_ms: float = Field(..., description="Wall time of the run", ge=0)
