"""
Configuration Port - Config records and the store that persists them.

Config holds the shared, remote-derived vocabulary (teams, users, statuses,
transitions, priority order, cycle history). LocalConfig holds the choices
of one working copy (current user, dev team, completion mode, filters).

Implementations:
- YamlConfigStore: YAML files in the base directory
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from teamtack.core.domain.entities import CycleInfo
from teamtack.core.domain.enums import (
    DEFAULT_PRIORITY_ORDER,
    CompletionMode,
    SemanticState,
    SourceType,
    StatusSource,
)
from teamtack.core.domain.transitions import StatusTransitions
from teamtack.core.exceptions import ConfigurationError, ValidationError


CYCLE_HISTORY_LIMIT = 10


@dataclass
class TeamConfig:
    """A team (Linear) or board (Trello)."""

    id: str
    name: str
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.icon:
            data["icon"] = self.icon
        return data


@dataclass
class UserConfig:
    """A tracker user or board member."""

    id: str
    email: str = ""
    display_name: str = ""
    role: str | None = None

    @property
    def identity(self) -> str:
        """Identifier matched against task assignees."""
        return self.email or self.id

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
        }
        if self.role:
            data["role"] = self.role
        return data


@dataclass
class LabelConfig:
    id: str
    name: str
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.color:
            data["color"] = self.color
        return data


@dataclass
class StatusConfig:
    name: str
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type}


@dataclass
class QaPmTeamConfig:
    """A non-dev team that receives parent cascades, with its testing status."""

    team: str
    testing_status: str

    def to_dict(self) -> dict[str, Any]:
        return {"team": self.team, "testing_status": self.testing_status}


@dataclass
class SourceConfig:
    """Which backend this deployment talks to, plus inline Trello keys."""

    type: SourceType = SourceType.LINEAR
    trello_api_key: str | None = None
    trello_token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.trello_api_key or self.trello_token:
            data["trello"] = {"api_key": self.trello_api_key, "token": self.trello_token}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SourceConfig:
        data = data or {}
        trello = data.get("trello") or {}
        try:
            source_type = SourceType.from_string(data.get("type"))
        except ValidationError as e:
            raise ConfigurationError(f"{e.message} in source.type") from e
        return cls(
            type=source_type,
            trello_api_key=trello.get("api_key"),
            trello_token=trello.get("token"),
        )


@dataclass
class Credentials:
    """API credentials, read from the environment rather than config files."""

    linear_api_key: str | None = None
    trello_api_key: str | None = None
    trello_token: str | None = None


def build_key(name: str) -> str:
    """Config key for a remote name: lowercased, non-alphanumerics to ``_``."""
    return "".join(ch if ch.isascii() and ch.isalnum() else "_" for ch in name.lower())


@dataclass
class Config:
    """
    Shared, remote-derived vocabulary.

    Written by ``init`` and the ``config`` commands, and by sync when the
    active cycle changes.
    """

    teams: dict[str, TeamConfig] = field(default_factory=dict)
    users: dict[str, UserConfig] = field(default_factory=dict)
    labels: dict[str, LabelConfig] = field(default_factory=dict)
    statuses: dict[str, StatusConfig] = field(default_factory=dict)
    status_transitions: StatusTransitions = field(default_factory=StatusTransitions)
    team_status_transitions: dict[str, StatusTransitions] = field(default_factory=dict)
    priority_order: list[str] = field(default_factory=lambda: list(DEFAULT_PRIORITY_ORDER))
    current_cycle: CycleInfo | None = None
    cycle_history: list[CycleInfo] = field(default_factory=list)
    source: SourceConfig = field(default_factory=SourceConfig)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_team(self, key: str) -> TeamConfig:
        team = self.teams.get(key)
        if team is None:
            raise ConfigurationError(
                f"Team '{key}' not found in config. Known teams: {', '.join(self.teams) or 'none'}"
            )
        return team

    def get_user(self, key: str) -> UserConfig:
        user = self.users.get(key)
        if user is None:
            raise ConfigurationError(f"User '{key}' not found in config")
        return user

    def team_key_for_id(self, team_id: str | None) -> str | None:
        if not team_id:
            return None
        for key, team in self.teams.items():
            if team.id == team_id:
                return key
        return None

    def transitions_for(self, team_key: str | None = None) -> StatusTransitions:
        """Transition table for a team, falling back to the shared one."""
        if team_key and team_key in self.team_status_transitions:
            return self.team_status_transitions[team_key]
        return self.status_transitions

    def resolve(self, state: SemanticState, team_key: str | None = None) -> str | None:
        return self.transitions_for(team_key).resolve(state)

    def status_type(self, name: str) -> str | None:
        for status in self.statuses.values():
            if status.name == name:
                return status.type
        return None

    # -------------------------------------------------------------------------
    # Cycle history
    # -------------------------------------------------------------------------

    def record_cycle(self, cycle: CycleInfo) -> bool:
        """
        Make ``cycle`` current, archiving the previous one.

        Returns True when the config changed and should be saved. History is
        most-recent-first, unique by id and capped at CYCLE_HISTORY_LIMIT.
        """
        if self.current_cycle and self.current_cycle.id == cycle.id:
            return False
        if self.current_cycle:
            previous = self.current_cycle
            history = [c for c in self.cycle_history if c.id != previous.id]
            history.insert(0, previous)
            self.cycle_history = history[:CYCLE_HISTORY_LIMIT]
        self.current_cycle = cycle
        return True

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": self.source.to_dict(),
            "teams": {k: v.to_dict() for k, v in self.teams.items()},
            "users": {k: v.to_dict() for k, v in self.users.items()},
            "labels": {k: v.to_dict() for k, v in self.labels.items()},
            "statuses": {k: v.to_dict() for k, v in self.statuses.items()},
            "status_transitions": self.status_transitions.to_dict(),
            "priority_order": list(self.priority_order),
            "cycle_history": [c.to_dict() for c in self.cycle_history],
        }
        if self.team_status_transitions:
            data["team_status_transitions"] = {
                k: v.to_dict() for k, v in self.team_status_transitions.items()
            }
        if self.current_cycle:
            data["current_cycle"] = self.current_cycle.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        current = data.get("current_cycle")
        return cls(
            teams={
                k: TeamConfig(id=str(v["id"]), name=v.get("name", k), icon=v.get("icon"))
                for k, v in (data.get("teams") or {}).items()
            },
            users={
                k: UserConfig(
                    id=str(v["id"]),
                    email=v.get("email") or "",
                    display_name=v.get("display_name") or v.get("displayName") or "",
                    role=v.get("role"),
                )
                for k, v in (data.get("users") or {}).items()
            },
            labels={
                k: LabelConfig(id=str(v["id"]), name=v.get("name", k), color=v.get("color"))
                for k, v in (data.get("labels") or {}).items()
            },
            statuses={
                k: StatusConfig(name=v.get("name", k), type=v.get("type") or "")
                for k, v in (data.get("statuses") or {}).items()
            },
            status_transitions=StatusTransitions.from_dict(data.get("status_transitions")),
            team_status_transitions={
                k: StatusTransitions.from_dict(v)
                for k, v in (data.get("team_status_transitions") or {}).items()
            },
            priority_order=list(data.get("priority_order") or DEFAULT_PRIORITY_ORDER),
            current_cycle=CycleInfo.from_dict(current) if current else None,
            cycle_history=[CycleInfo.from_dict(c) for c in data.get("cycle_history") or []],
            source=SourceConfig.from_dict(data.get("source")),
        )


@dataclass
class LocalConfig:
    """Choices of a single working copy."""

    current_user: str
    team: str
    dev_testing_status: str | None = None
    qa_pm_teams: list[QaPmTeamConfig] = field(default_factory=list)
    completion_mode: CompletionMode | None = None
    labels: list[str] = field(default_factory=list)
    exclude_labels: list[str] = field(default_factory=list)
    status_source: StatusSource = StatusSource.REMOTE

    @property
    def effective_completion_mode(self) -> CompletionMode:
        """Explicit mode, else upstream_strict when QA/PM teams exist, else simple."""
        if self.completion_mode is not None:
            return self.completion_mode
        if self.qa_pm_teams:
            return CompletionMode.UPSTREAM_STRICT
        return CompletionMode.SIMPLE

    def dev_testing(self, config: Config) -> str | None:
        """Status the dev team's own tasks move to when handed to review."""
        return self.dev_testing_status or config.transitions_for(self.team).testing

    def qa_pm_entry(self, team_key: str | None) -> QaPmTeamConfig | None:
        for entry in self.qa_pm_teams:
            if entry.team == team_key:
                return entry
        return None

    def validate(self, config: Config) -> list[str]:
        """Return a list of problems; empty when the local config is usable."""
        errors = []
        if self.team not in config.teams:
            errors.append(f"Dev team '{self.team}' is not defined in config")
        if self.current_user not in config.users:
            errors.append(f"Current user '{self.current_user}' is not defined in config")
        for entry in self.qa_pm_teams:
            if entry.team not in config.teams:
                errors.append(f"QA/PM team '{entry.team}' is not defined in config")
        return errors

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "current_user": self.current_user,
            "team": self.team,
            "status_source": self.status_source.value,
        }
        if self.dev_testing_status:
            data["dev_testing_status"] = self.dev_testing_status
        if self.qa_pm_teams:
            data["qa_pm_teams"] = [entry.to_dict() for entry in self.qa_pm_teams]
        if self.completion_mode:
            data["completion_mode"] = self.completion_mode.value
        if self.labels:
            data["labels"] = list(self.labels)
        if self.exclude_labels:
            data["exclude_labels"] = list(self.exclude_labels)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], config: Config | None = None) -> LocalConfig:
        """
        Build from a mapping, upgrading legacy fields.

        A single ``qa_pm_team`` becomes a one-entry ``qa_pm_teams`` using the
        shared testing status; a single ``label`` becomes ``labels``.
        """
        if not data.get("current_user") or not data.get("team"):
            raise ConfigurationError("Local config requires 'current_user' and 'team'")

        qa_pm_teams = [
            QaPmTeamConfig(team=entry["team"], testing_status=entry["testing_status"])
            for entry in data.get("qa_pm_teams") or []
        ]
        legacy_team = data.get("qa_pm_team")
        if legacy_team and not qa_pm_teams:
            testing = config.status_transitions.testing if config else None
            if testing:
                qa_pm_teams.append(QaPmTeamConfig(team=legacy_team, testing_status=testing))

        labels = list(data.get("labels") or [])
        if data.get("label") and data["label"] not in labels:
            labels.append(data["label"])

        mode = data.get("completion_mode")
        return cls(
            current_user=data["current_user"],
            team=data["team"],
            dev_testing_status=data.get("dev_testing_status") or None,
            qa_pm_teams=qa_pm_teams,
            completion_mode=CompletionMode.from_string(mode) if mode else None,
            labels=labels,
            exclude_labels=list(data.get("exclude_labels") or []),
            status_source=StatusSource.from_string(data.get("status_source")),
        )


class ConfigStorePort(ABC):
    """
    Persistence for Config and LocalConfig.

    Both are loaded independently; a missing file raises ConfigurationError.
    """

    @abstractmethod
    def load_config(self) -> Config:
        ...

    @abstractmethod
    def save_config(self, config: Config) -> None:
        ...

    @abstractmethod
    def load_local(self, config: Config | None = None) -> LocalConfig:
        ...

    @abstractmethod
    def save_local(self, local: LocalConfig) -> None:
        ...

    @abstractmethod
    def exists(self) -> bool:
        """Whether a config file is already present."""
        ...
