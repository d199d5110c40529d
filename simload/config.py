import os
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .schema import FileKind


DELIMITER_ALIASES = {
    "tab": "\t",
    "\\t": "\t",
    "comma": ",",
    "semicolon": ";",
    "pipe": "|",
}


def _project_root() -> str:
    return os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), os.pardir))


class Settings(BaseSettings):
    """Model input configuration loaded from environment and .env file.

    Fields mirror the environment variable keys used throughout the project.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Tracer toggles
    PRINT_WARNINGS: bool = True
    PRINT_DEBUGS: bool = False
    PRINT_UPDATES: bool = True

    # Input files
    DELIMITER: str = "\t"
    INPUT_DIR: Optional[str] = None
    PATIENT_FILE: str = "patients.tsv"
    SURGEON_FILE: str = "surgeons.tsv"
    OPERATING_ROOM_FILE: str = "operating_rooms.tsv"

    # Failure logging
    LOG_DIR: Optional[str] = None
    FAILURE_LOG_FILE: Optional[str] = None

    # Optional time zone names
    TIMEZONE: Optional[str] = None
    TZ: Optional[str] = None

    @field_validator("DELIMITER", mode="before")
    @classmethod
    def _resolve_delimiter(cls, value):
        if isinstance(value, str):
            value = DELIMITER_ALIASES.get(value.lower(), value)
            if len(value) != 1:
                raise ValueError(f"DELIMITER must be a single character, got {value!r}")
        return value

    @property
    def input_dir(self) -> str:
        return os.path.abspath(self.INPUT_DIR or os.path.join(_project_root(), "input"))

    @property
    def log_dir(self) -> str:
        return os.path.abspath(self.LOG_DIR or os.path.join(_project_root(), "logs"))

    @property
    def failure_log_file(self) -> str:
        return self.FAILURE_LOG_FILE or os.path.join(self.log_dir, "failures.log")

    def input_files(self, input_dir: Optional[str] = None) -> Dict[FileKind, str]:
        """Return the configured input file for each file kind.

        Relative file names resolve against input_dir (or INPUT_DIR).
        """
        base = os.path.abspath(input_dir) if input_dir else self.input_dir
        names = {
            FileKind.PATIENT: self.PATIENT_FILE,
            FileKind.SURGEON: self.SURGEON_FILE,
            FileKind.OPERATING_ROOM: self.OPERATING_ROOM_FILE,
        }
        return {kind: os.path.join(base, name) for kind, name in names.items()}

    @property
    def timezone(self) -> ZoneInfo:
        """Return the configured IANA time zone, defaulting to UTC.

        Respects `TZ` or `TIMEZONE` if present in .env or environment.
        """

        name = self.TZ or self.TIMEZONE or "UTC"
        try:
            return ZoneInfo(str(name))
        except Exception:
            return ZoneInfo("UTC")


# Convenient singleton instance
settings = Settings()
