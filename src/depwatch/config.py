"""Runtime settings for depwatch."""

from pydantic import BaseModel, Field, field_validator

from depwatch.models import TARGET_DIRNAME


class Settings(BaseModel):
    """Options shared by the CLI and the TUI."""

    target_name: str = Field(TARGET_DIRNAME, description="Subfolder name to look for and delete")
    max_workers: int = Field(4, ge=1, description="Parallel size calculations per scan")
    dry_run: bool = Field(False, description="Report what would be deleted without deleting")
    verbose: bool = Field(False, description="Enable debug logging")

    @field_validator("target_name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if not value or value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"target name must be a plain folder name, got {value!r}")
        return value
