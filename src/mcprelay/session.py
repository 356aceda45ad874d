"""Process identity sent to MCP servers as client metadata."""

from __future__ import annotations

import os
from importlib import metadata

DEFAULT_ORIGIN = "mcprelay_cli"
ORIGINATOR_ENV = "MCPRELAY_ORIGINATOR"


def _installed_version() -> str:
    try:
        return metadata.version("mcprelay")
    except metadata.PackageNotFoundError:
        return "0.0.0-dev"


ORIGIN = os.environ.get(ORIGINATOR_ENV, "").strip() or DEFAULT_ORIGIN
CLI_VERSION = _installed_version()
