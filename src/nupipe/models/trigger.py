"""Source change event model."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SourceChange(BaseModel):
    """A change detected on a watched branch."""

    model_config = ConfigDict(frozen=True)

    branch: str
    revision: str = ""
    detected_at: datetime = Field(default_factory=datetime.now)
