"""Settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


def _load_env() -> None:
    """Load .env from project root if it exists."""
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)


_load_env()


@dataclass(frozen=True)
class Settings:
    # Shadow pass
    shadow_enabled: bool = field(
        default_factory=lambda: os.environ.get("SHADOW_ENABLED", "true").lower() == "true"
    )
    shadow_top_n: int = field(default_factory=lambda: int(os.environ.get("SHADOW_TOP_N", "5")))
    shadow_match_threshold: float = field(
        default_factory=lambda: float(os.environ.get("SHADOW_MATCH_THRESHOLD", "0.4"))
    )
    shadow_confidence_floor: float = field(
        default_factory=lambda: float(os.environ.get("SHADOW_CONFIDENCE_FLOOR", "0.4"))
    )

    # Run event log
    run_log_dir: str = field(default_factory=lambda: os.environ.get("RUN_LOG_DIR", "runs/"))
    event_log_enabled: bool = field(
        default_factory=lambda: os.environ.get("EVENT_LOG_ENABLED", "true").lower() == "true"
    )

    def validate(self) -> list[str]:
        """Return list of validation errors. Empty list means valid."""
        errors = []
        if self.shadow_top_n < 1:
            errors.append(f"SHADOW_TOP_N must be >= 1, got {self.shadow_top_n}")
        if not 0.0 < self.shadow_match_threshold <= 1.0:
            errors.append(
                f"SHADOW_MATCH_THRESHOLD must be in (0, 1], got {self.shadow_match_threshold}"
            )
        if not 0.0 <= self.shadow_confidence_floor < 1.0:
            errors.append(
                f"SHADOW_CONFIDENCE_FLOOR must be in [0, 1), got {self.shadow_confidence_floor}"
            )
        if self.event_log_enabled and not self.run_log_dir:
            errors.append("RUN_LOG_DIR is required when EVENT_LOG_ENABLED is true")
        return errors

    def warnings(self) -> list[str]:
        """Return list of non-fatal configuration warnings."""
        warns: list[str] = []
        if self.shadow_confidence_floor > 0.8:
            warns.append(
                f"SHADOW_CONFIDENCE_FLOOR={self.shadow_confidence_floor} is aggressive. "
                "Base confidence caps at 0.9, so most statements will be discarded."
            )
        if self.shadow_match_threshold < 0.2:
            warns.append(
                f"SHADOW_MATCH_THRESHOLD={self.shadow_match_threshold} is permissive. "
                "Unrelated statements may be matched to primary claims."
            )
        return warns


def get_settings() -> Settings:
    """Create Settings from current environment."""
    return Settings()
