"""
Tests for the task source factory.
"""

import pytest

from teamtack.adapters.linear import LinearAdapter
from teamtack.adapters.trello import TrelloAdapter
from teamtack.core.domain.enums import SourceType
from teamtack.core.exceptions import ConfigurationError
from teamtack.core.ports.config_provider import Config, Credentials, SourceConfig
from teamtack.core.services import create_task_source


class TestCreateTaskSource:
    """Tests for create_task_source."""

    def test_linear(self):
        source = create_task_source(Config(), Credentials(linear_api_key="lin_api_x"))

        assert isinstance(source, LinearAdapter)
        source.close()

    def test_linear_without_key(self):
        with pytest.raises(ConfigurationError, match="LINEAR_API_KEY"):
            create_task_source(Config(), Credentials())

    def test_trello_from_environment(self):
        config = Config(source=SourceConfig(type=SourceType.TRELLO))

        source = create_task_source(
            config, Credentials(trello_api_key="key", trello_token="token"), dry_run=True
        )

        assert isinstance(source, TrelloAdapter)
        source.close()

    def test_trello_config_overrides_environment(self):
        config = Config(
            source=SourceConfig(type=SourceType.TRELLO, trello_api_key="k", trello_token="t")
        )

        assert isinstance(create_task_source(config, Credentials()), TrelloAdapter)

    def test_trello_without_token(self):
        config = Config(source=SourceConfig(type=SourceType.TRELLO))

        with pytest.raises(ConfigurationError, match="TRELLO_TOKEN"):
            create_task_source(config, Credentials(trello_api_key="key"))
