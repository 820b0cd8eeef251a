"""Pydantic schemas for the query API and pipeline values."""
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

ChartType = Literal["bar", "line", "pie"]


class QueryRequest(BaseModel):
    question: str = Field(..., min_length=1, description="Natural-language business question")

    @field_validator("question")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question must not be blank")
        return v


class GeneratedQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    sql: str = Field(..., min_length=1)
    provenance: Literal["initial", "regenerated"] = "initial"


class Explanation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer: str = Field(..., min_length=1)
    chart_type: ChartType = Field("bar", alias="chartType")


class QueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    sql: str
    data: list[dict[str, Any]] = Field(default_factory=list)
    answer: str
    chart_type: ChartType = Field("bar", alias="chartType")
