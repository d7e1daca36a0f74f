"""
Setup - build Config and LocalConfig from what the tracker reports.
"""

import logging
from dataclasses import dataclass, replace

from teamtack.core.domain.entities import CycleInfo
from teamtack.core.domain.enums import SourceType
from teamtack.core.domain.transitions import StatusTransitions, normalize_todo
from teamtack.core.exceptions import ConfigurationError, ValidationError
from teamtack.core.ports.config_provider import (
    Config,
    ConfigStorePort,
    LabelConfig,
    LocalConfig,
    QaPmTeamConfig,
    SourceConfig,
    StatusConfig,
    TeamConfig,
    UserConfig,
    build_key,
)
from teamtack.core.ports.task_source import (
    InitData,
    SourceStatus,
    SourceTeam,
    SourceUser,
    TaskSourcePort,
)


logger = logging.getLogger("Setup")


@dataclass
class InitOptions:
    source_type: SourceType = SourceType.LINEAR
    team: str | None = None
    user: str | None = None
    force: bool = False


def _user_key(user: SourceUser) -> str:
    base = user.display_name or user.name or user.email.split("@")[0] or user.id
    return build_key(base)


def build_config(data: InitData, source: SourceConfig) -> Config:
    """Config from init data; transitions are inferred from the team's statuses."""
    cycle = data.current_cycle
    return Config(
        teams={
            build_key(t.name): TeamConfig(id=t.id, name=t.name, icon=t.icon) for t in data.teams
        },
        users={
            _user_key(u): UserConfig(id=u.id, email=u.email, display_name=u.display_name or u.name)
            for u in data.users
        },
        labels={
            build_key(label.name): LabelConfig(id=label.id, name=label.name, color=label.color)
            for label in data.labels
            if label.name
        },
        statuses={build_key(s.name): StatusConfig(name=s.name, type=s.type) for s in data.statuses},
        status_transitions=StatusTransitions.infer(data.statuses),
        current_cycle=(
            CycleInfo(
                id=cycle.id, name=cycle.name, start_date=cycle.start_date, end_date=cycle.end_date
            )
            if cycle
            else None
        ),
        source=source,
    )


def select_team(teams: list[SourceTeam], wanted: str | None) -> SourceTeam:
    """Match a team by id, key, name or config key; the first team when unset."""
    if not teams:
        raise ConfigurationError("The tracker reported no teams or boards")
    if not wanted:
        return teams[0]
    lowered = wanted.lower()
    for team in teams:
        names = {team.id.lower(), team.name.lower(), build_key(team.name)}
        if team.key:
            names.add(team.key.lower())
        if lowered in names:
            return team
    raise ValidationError(
        f"Team '{wanted}' not found. Available: {', '.join(t.name for t in teams)}"
    )


def select_user(config: Config, wanted: str | None) -> str:
    """Config key of the current user, matched by key, email or id."""
    if not config.users:
        raise ConfigurationError("The tracker reported no users")
    if not wanted:
        key = next(iter(config.users))
        logger.warning(f"No user given; using '{key}'. Change it with 'ttt config teams'.")
        return key
    lowered = wanted.lower()
    for key, user in config.users.items():
        if lowered in (key, user.email.lower(), user.id.lower()):
            return key
    raise ValidationError(f"User '{wanted}' not found. Available: {', '.join(config.users)}")


class InitWorkflow:
    """Creates the config files for a new working copy."""

    def __init__(self, source: TaskSourcePort, store: ConfigStorePort):
        self.source = source
        self.store = store

    def run(self, options: InitOptions) -> tuple[Config, LocalConfig]:
        """
        Fetch init data and write both config files.

        Raises:
            ValidationError: If a config exists and ``force`` is not set.
        """
        if self.store.exists() and not options.force:
            raise ValidationError("Config already exists. Use --force to overwrite it.")

        if not self.source.validate_connection():
            raise ConfigurationError(f"Could not connect to {self.source.name}")

        team = select_team(self.source.get_teams(), options.team)
        data = self.source.get_init_data(team.id)
        config = build_config(data, SourceConfig(type=options.source_type))

        team_key = config.team_key_for_id(team.id) or build_key(team.name)
        local = LocalConfig(current_user=select_user(config, options.user), team=team_key)

        self.store.save_config(config)
        self.store.save_local(local)
        logger.info(f"Initialized {self.source.name} config for team {team.name}")
        return config, local


# -------------------------------------------------------------------------
# Config edits
# -------------------------------------------------------------------------


def update_status_transitions(
    config: Config,
    team_key: str,
    statuses: list[SourceStatus],
    todo: list[str] | None = None,
    in_progress: str | None = None,
    done: str | None = None,
    testing: str | None = None,
    blocked: str | None = None,
) -> StatusTransitions:
    """
    Change the transitions used for a team.

    Names are checked case-insensitively against the team's remote statuses
    and stored with the remote spelling. A team with its own override gets
    the override updated; otherwise the shared transitions change.

    Raises:
        ValidationError: If a name is not a status of the team.
    """
    by_name = {status.name.lower(): status.name for status in statuses}

    def checked(name: str) -> str:
        canonical = by_name.get(name.strip().lower())
        if canonical is None:
            available = ", ".join(status.name for status in statuses)
            raise ValidationError(f"Unknown status '{name}'. Available: {available}")
        return canonical

    changes: dict = {}
    if todo:
        changes["todo"] = normalize_todo([checked(name) for name in todo])
    if in_progress:
        changes["in_progress"] = checked(in_progress)
    if done:
        changes["done"] = checked(done)
    if testing:
        changes["testing"] = checked(testing)
    if blocked:
        changes["blocked"] = checked(blocked)

    if team_key in config.team_status_transitions:
        updated = replace(config.team_status_transitions[team_key], **changes)
        config.team_status_transitions[team_key] = updated
    else:
        updated = replace(config.status_transitions, **changes)
        config.status_transitions = updated
    logger.info(f"Status transitions for {team_key}: {updated.to_dict()}")
    return updated


def parse_qa_pm_team(value: str, config: Config) -> QaPmTeamConfig:
    """
    Parse ``KEY:STATUS`` into a QA/PM team entry.

    A bare ``KEY`` uses the team's testing status.
    """
    team_key, _, status = value.partition(":")
    team_key = team_key.strip()
    config.get_team(team_key)
    testing = status.strip() or config.transitions_for(team_key).testing
    if not testing:
        raise ValidationError(f"No testing status for QA/PM team '{team_key}'; use KEY:STATUS")
    return QaPmTeamConfig(team=team_key, testing_status=testing)
