"""
Progress Data Models

Shared data model for the progress of the transfer currently in flight.
Produced by the rsync output parser and read by the frontends.
"""

from dataclasses import dataclass

SYNCING_PLACEHOLDER = "Syncing..."


@dataclass(frozen=True)
class ProgressSnapshot:
    """Most recently parsed progress state of the running download."""
    file_name: str = SYNCING_PLACEHOLDER
    percentage: int = 0  # 0-100
    speed: str = ""  # Verbatim from rsync, e.g. "1.23MB/s"

    def __post_init__(self):
        """Ensure percentage is in valid range."""
        object.__setattr__(self, "percentage", max(0, min(100, int(self.percentage))))

    @property
    def gauge_label(self) -> str:
        """Get label text for the progress gauge, like '45% @ 1.23MB/s'."""
        if self.speed:
            return f"{self.percentage}% @ {self.speed}"
        return f"{self.percentage}%"
