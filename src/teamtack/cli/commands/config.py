"""
Config command handlers.

- config show: print the shared and local configuration
- config status: list or change the status transitions of the dev team
- config filters: include/exclude label filters for sync
- config teams: dev team, QA/PM teams, completion mode and status source
"""

import argparse

from teamtack.application.setup import parse_qa_pm_team, update_status_transitions
from teamtack.core.domain.enums import CompletionMode, StatusSource
from teamtack.core.exceptions import ConfigurationError

from ..context import CommandContext
from ..exit_codes import ExitCode
from ..output import Console


__all__ = [
    "run_config_filters",
    "run_config_show",
    "run_config_status",
    "run_config_teams",
]


def run_config_show(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    config, local = ctx.config, ctx.local
    team = config.get_team(local.team)
    user = config.get_user(local.current_user)
    mode = local.effective_completion_mode

    console.header("TeamTack configuration")
    console.field("Directory", ctx.paths.base_dir, width=15)
    console.field("Source", config.source.type.value, width=15)
    console.field("Team", f"{team.name} ({local.team})", width=15)
    console.field("User", f"{user.display_name or user.email} ({local.current_user})", width=15)
    console.field("Status source", local.status_source.value, width=15)
    console.field("Completion", f"{mode.value} - {mode.description}", width=15)
    console.field("Dev testing", local.dev_testing(config) or "-", width=15)

    if local.qa_pm_teams:
        console.section("QA/PM teams")
        for entry in local.qa_pm_teams:
            console.item(f"{entry.team} -> {entry.testing_status}")

    _print_transitions(console, ctx)
    _print_filters(console, ctx)

    if config.current_cycle:
        console.section("Cycles")
        console.item(config.current_cycle.name, "current")
        for cycle in config.cycle_history:
            if cycle.id != config.current_cycle.id:
                console.item(cycle.name)
    return ExitCode.SUCCESS


def run_config_status(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    List the dev team's remote statuses or change the transitions.

    Every name is checked against the team's remote statuses.
    """
    config, local = ctx.config, ctx.local
    team = config.get_team(local.team)
    statuses = ctx.source().get_statuses(team.id)

    changes = {
        "todo": args.todo,
        "in_progress": args.in_progress,
        "done": args.done,
        "testing": args.testing,
        "blocked": args.blocked,
    }
    if not any(changes.values()):
        transitions = config.transitions_for(local.team)
        used: dict[str, str] = {}
        for key, value in transitions.to_dict().items():
            for name in value if isinstance(value, list) else [value]:
                if name:
                    used[name] = key
        console.section(f"Statuses of {team.name}")
        rows = [[s.name, s.type, used.get(s.name, "")] for s in statuses]
        console.table(["Status", "Type", "Used as"], rows)
        return ExitCode.SUCCESS

    update_status_transitions(config, local.team, statuses, **changes)
    ctx.store.save_config(config)
    console.success("Status transitions updated")
    _print_transitions(console, ctx)
    return ExitCode.SUCCESS


def run_config_filters(
    console: Console, ctx: CommandContext, args: argparse.Namespace
) -> ExitCode:
    local = ctx.local
    changed = False

    if args.clear:
        local.labels = []
        local.exclude_labels = []
        changed = True
    if args.label:
        local.labels = _dedupe(args.label)
        changed = True
    if args.exclude_label:
        local.exclude_labels = _dedupe(args.exclude_label)
        changed = True

    if changed:
        ctx.store.save_local(local)
        console.success("Label filters updated")
    _print_filters(console, ctx)
    return ExitCode.SUCCESS


def run_config_teams(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    config, local = ctx.config, ctx.local
    changed = False

    if args.team:
        config.get_team(args.team)
        local.team = args.team
        changed = True
    if args.qa_pm_team:
        local.qa_pm_teams = [parse_qa_pm_team(value, config) for value in args.qa_pm_team]
        changed = True
    if args.dev_testing_status:
        local.dev_testing_status = args.dev_testing_status
        changed = True
    if args.completion_mode:
        local.completion_mode = CompletionMode.from_string(args.completion_mode)
        changed = True
    if args.status_source:
        local.status_source = StatusSource.from_string(args.status_source)
        changed = True

    if changed:
        errors = local.validate(config)
        if errors:
            raise ConfigurationError("; ".join(errors))
        ctx.store.save_local(local)
        console.success("Team settings updated")

    console.section("Teams")
    for key, team in config.teams.items():
        marker = None
        if key == local.team:
            marker = "dev"
        elif local.qa_pm_entry(key):
            marker = f"qa/pm: {local.qa_pm_entry(key).testing_status}"
        console.item(f"{team.name} ({key})", marker)
    mode = local.effective_completion_mode
    console.detail(f"Completion mode: {mode.value} - {mode.description}")
    return ExitCode.SUCCESS


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------


def _dedupe(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _print_transitions(console: Console, ctx: CommandContext) -> None:
    transitions = ctx.config.transitions_for(ctx.local.team)
    console.section("Status transitions")
    for key, value in [
        ("todo", ", ".join(transitions.todo)),
        ("in_progress", transitions.in_progress),
        ("done", transitions.done),
        ("testing", transitions.testing or "-"),
        ("blocked", transitions.blocked or "-"),
    ]:
        console.field(key, value, width=13)


def _print_filters(console: Console, ctx: CommandContext) -> None:
    local = ctx.local
    console.section("Label filters")
    console.field("include", ", ".join(local.labels) or "-", width=9)
    console.field("exclude", ", ".join(local.exclude_labels) or "-", width=9)
