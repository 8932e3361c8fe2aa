"""
Tool settings loaded from the environment.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()


class ToolSettings(BaseModel):
    """
    Settings for the external tooling htmlpack drives.

    Attributes:
        node_binary: Node.js executable used for the bundler, critical-CSS and
            Node minifier collaborators.
        log_level: Default log level for the command line interface.
    """
    node_binary: str = Field(default="node", alias="HTMLPACK_NODE")
    log_level: Optional[str] = Field(default=None, alias="HTMLPACK_LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
    }


@lru_cache(maxsize=1)
def get_tool_settings() -> ToolSettings:
    """
    Load tool settings from environment/.env exactly once.
    """
    values = {
        field.alias: os.environ[field.alias]
        for field in ToolSettings.model_fields.values()
        if os.environ.get(field.alias)
    }
    return ToolSettings(**values)
