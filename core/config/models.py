"""Engine configuration model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.extract.calls import DEFAULT_INVOCATION_TOKEN


class EngineConfig(BaseModel):
    """Engine settings loaded from YAML."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    invocation_token: str = Field(default=DEFAULT_INVOCATION_TOKEN, min_length=1)
    preview_length: int = Field(default=120, ge=1)
    module_preview_length: int = Field(default=50, ge=1)
    diagnostic_length: int = Field(default=100, ge=1)
    max_workers: int = Field(default=1, ge=1)
