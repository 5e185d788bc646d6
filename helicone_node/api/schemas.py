from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    status: str = Field(
        description="`ok` means the node service is up; the gateway is not contacted.",
        examples=["ok"],
    )
