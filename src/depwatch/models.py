"""Data models for depwatch."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

TARGET_DIRNAME = "node_modules"

BYTES_PER_MB = 1024 * 1024


class ScanState(str, Enum):
    """Whether the controller is busy with filesystem work."""

    IDLE = "idle"
    SCANNING = "scanning"


class Candidate(BaseModel):
    """A project folder holding a target subfolder that can be deleted."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display label (the project folder name)")
    path: str = Field(..., description="Absolute path of the project folder")
    size_bytes: int = Field(..., ge=0, description="Size of the target subfolder in bytes")
    target_name: str = Field(TARGET_DIRNAME, description="Name of the target subfolder")

    @property
    def target_path(self) -> Path:
        """The folder that gets deleted."""
        return Path(self.path) / self.target_name

    @property
    def size_mb(self) -> float:
        """Size in megabytes (binary, 1 MB = 1,048,576 bytes)."""
        return self.size_bytes / BYTES_PER_MB

    @property
    def size_human(self) -> str:
        """Size formatted the way the candidate list shows it."""
        return f"{self.size_mb:.2f} MB"


class ScanReport(BaseModel):
    """Outcome of one scan of a root directory."""

    root: str = Field(..., description="Directory that was scanned")
    candidates: list[Candidate] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Error detail if the root could not be read")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_bytes(self) -> int:
        """Total bytes across all candidates."""
        return sum(c.size_bytes for c in self.candidates)

    @property
    def total_mb(self) -> float:
        return sum(c.size_mb for c in self.candidates)


class DeletionOutcome(BaseModel):
    """Result of deleting one candidate's target subfolder."""

    path: str = Field(..., description="Candidate path whose target was deleted")
    success: bool = Field(True, description="Whether the deletion succeeded")
    error: Optional[str] = Field(None, description="Error message if failed")
    bytes_freed: int = Field(0, description="Bytes freed by the deletion")
    dry_run: bool = Field(False, description="Whether this was a dry run")

    @property
    def name(self) -> str:
        return Path(self.path).name
