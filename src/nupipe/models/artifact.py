"""Package artifact model."""

from pydantic import BaseModel, ConfigDict, Field

from .version import Version


def artifact_file_name(package_name: str, version: Version) -> str:
    """File name of a package: <PackageName>.<version>.nupkg."""
    return f"{package_name}.{version.render()}.nupkg"


class Artifact(BaseModel):
    """A single versioned package produced by one packaging step.

    The payload is held in memory for the run that produced it and is not
    serialized; the artifact file is the durable copy.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Package name")
    version: Version
    file_name: str = Field(description="Artifact file name")
    payload: bytes = Field(default=b"", exclude=True, repr=False)
    sha256: str = Field(description="SHA256 of the artifact file")
    is_pre_release: bool = Field(default=False)
