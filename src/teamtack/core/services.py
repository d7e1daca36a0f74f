"""
Service factories.

The command layer never imports a concrete adapter; it asks these factories
for one, keyed by the source type recorded in the config.
"""

import logging

from .domain.enums import SourceType
from .exceptions import ConfigurationError
from .ports.config_provider import Config, Credentials
from .ports.task_source import TaskSourcePort


logger = logging.getLogger("Services")


def create_task_source(
    config: Config,
    credentials: Credentials,
    dry_run: bool = False,
) -> TaskSourcePort:
    """
    Create the adapter for the configured source type.

    Args:
        config: Loaded shared config; ``config.source.type`` selects the backend.
        credentials: API credentials from the environment.
        dry_run: If True, writes are logged instead of sent.

    Raises:
        ConfigurationError: If credentials for the selected backend are missing.
    """
    source_type = config.source.type
    logger.debug(f"Creating task source for {source_type.value}")

    if source_type is SourceType.LINEAR:
        from teamtack.adapters.linear import LinearAdapter

        if not credentials.linear_api_key:
            raise ConfigurationError(
                "LINEAR_API_KEY is not set. Export it or add it to a .env file."
            )
        return LinearAdapter(api_key=credentials.linear_api_key, dry_run=dry_run)

    if source_type is SourceType.TRELLO:
        from teamtack.adapters.trello import TrelloAdapter

        api_key = config.source.trello_api_key or credentials.trello_api_key
        token = config.source.trello_token or credentials.trello_token
        if not api_key or not token:
            raise ConfigurationError(
                "Trello credentials missing. Set TRELLO_API_KEY and TRELLO_TOKEN."
            )
        return TrelloAdapter(api_key=api_key, token=token, dry_run=dry_run)

    raise ConfigurationError(f"Unknown source type: {source_type}")
