"""Models for minifier output."""

from pydantic import BaseModel, ConfigDict, Field


class MinifyResult(BaseModel):
    """Code produced by a minifier, plus its optional source map."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Minified code, banner included")
    source_map: str | None = Field(default=None, description="Source map JSON payload")
