from typing import List

from pydantic import BaseModel, Field


class HealthDTO(BaseModel):
    status: str = "ok"
    sources: List[str] = Field(default_factory=list)
    cache_ttl_seconds: float


class ErrorDTO(BaseModel):
    detail: str
