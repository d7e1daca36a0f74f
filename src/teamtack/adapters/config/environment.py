"""
Credentials from the process environment and an optional ``.env`` file.

Values already in the environment win over the ``.env`` file. The file is
read with python-dotenv without touching ``os.environ``.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from teamtack.core.ports.config_provider import Credentials


logger = logging.getLogger("Environment")


def load_credentials(
    env_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """
    Build Credentials from the environment.

    Args:
        env_file: ``.env`` file to read; defaults to ``./.env`` when present.
        environ: Environment mapping, defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    path = env_file or Path.cwd() / ".env"

    file_values: dict[str, str | None] = {}
    if path.is_file():
        logger.debug(f"Reading credentials from {path}")
        file_values = dotenv_values(path)

    def lookup(name: str) -> str | None:
        return env.get(name) or file_values.get(name) or None

    return Credentials(
        linear_api_key=lookup("LINEAR_API_KEY"),
        trello_api_key=lookup("TRELLO_API_KEY"),
        trello_token=lookup("TRELLO_TOKEN"),
    )
