"""
Run inline Node.js ES modules for the JavaScript tooling htmlpack drives.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import get_tool_settings
from ..util import ExecutionResult, execute

logger = logging.getLogger(__name__)

PAYLOAD_ENV = "HTMLPACK_PAYLOAD"


def run_node_module(
    source: str,
    payload: Mapping[str, Any],
    *,
    cwd: Path | str,
    capture: bool = False,
    input_text: Optional[str] = None,
) -> ExecutionResult:
    """
    Evaluate ``source`` as an ES module with ``node --input-type=module``.

    The payload is serialized to JSON in the ``HTMLPACK_PAYLOAD`` environment
    variable. Bare imports resolve from ``cwd``, so packages installed in the
    project being bundled are used.

    Raises:
        ExecutionError: If node cannot be started or the module fails.
    """
    env = dict(os.environ)
    env[PAYLOAD_ENV] = json.dumps(dict(payload), default=str)
    node = get_tool_settings().node_binary
    logger.debug("Running inline node module in %s", cwd)
    return execute(
        node,
        ["--input-type=module", "-e", source],
        capture=capture,
        cwd=cwd,
        env=env,
        input_text=input_text,
    )
