from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ClientConfig(BaseModel):
    """Settings shared by the client tools, loaded from config.yaml. All optional."""

    socket_path: str | None = None
    log_level: LogLevel = "WARNING"
    indent: int = 4

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if not 0 <= v <= 16:
            raise ValueError("'indent' must be between 0 and 16")
        return v

    @field_validator("socket_path")
    @classmethod
    def validate_socket_path(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("'socket_path' must not be empty")
        return v
