from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "0.0.0.0"  # all interfaces, for Docker
DEFAULT_PORT = 8000


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    host: str = DEFAULT_HOST
    # 0 lets the OS pick a free port
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            host=os.getenv("HOST", DEFAULT_HOST),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
        )
