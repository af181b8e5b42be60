"""Per-invocation pipeline input."""

from pydantic import BaseModel, ConfigDict, Field


class InvocationInput(BaseModel):
    """Invocation parameters for the build and release pipelines.

    Accepts the camelCase keys of a CI parameter map (``baseVersion``,
    ``buildCounter``...) as well as the snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_version: str = Field(alias="baseVersion")
    build_counter: int | None = Field(default=None, ge=0, alias="buildCounter")
    pre_release_label: str | None = Field(default=None, alias="preReleaseLabel")
    should_publish: bool = Field(default=False, alias="shouldPublish")
    feed_endpoint: str | None = Field(default=None, alias="feedEndpoint")
    feed_credential_ref: str | None = Field(default=None, alias="feedCredentialRef")
