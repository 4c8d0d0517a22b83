from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .format import FormatString

CONFIG_NAMES = ("smplinfo.yaml", "smplinfo.yml")


class ScanSettings(BaseModel):
    include_extensions: List[str] = Field(default_factory=lambda: [".wav", ".wave"])
    exclude_patterns: List[str] = Field(default_factory=list)
    recursive: bool = False

    @field_validator("include_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, values: List[str]) -> List[str]:
        normalized = []
        for value in values:
            ext = str(value).strip().lower()
            if ext and not ext.startswith("."):
                ext = f".{ext}"
            normalized.append(ext)
        return normalized


class FormatSettings(BaseModel):
    strict: bool = True
    default_template: Optional[str] = None

    @field_validator("default_template")
    @classmethod
    def _check_template(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return None
        # InvalidFormat is a ValueError, so pydantic reports it as a validation error.
        FormatString.parse(value, strict=info.data.get("strict", True))
        return value


class WriteSettings(BaseModel):
    atomic: bool = False


class LoggingSettings(BaseModel):
    level: str = "INFO"
    warnings_log: Optional[Path] = None

    @field_validator("warnings_log", mode="before")
    @classmethod
    def _expand_log(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser().resolve()


class Settings(BaseModel):
    scan: ScanSettings = ScanSettings()
    format: FormatSettings = FormatSettings()
    write: WriteSettings = WriteSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for name in CONFIG_NAMES:
        candidate = cwd / name
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    path = find_config(explicit_path)
    if path is None:
        return Settings()
    return Settings.load(path)
