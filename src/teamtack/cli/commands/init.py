"""
Init command handler.
"""

import argparse

from teamtack.adapters.config import load_credentials
from teamtack.application.setup import InitOptions, InitWorkflow
from teamtack.core.domain.enums import SourceType
from teamtack.core.ports.config_provider import Config, SourceConfig
from teamtack.core.services import create_task_source

from ..context import CommandContext
from ..exit_codes import ExitCode
from ..output import Console


__all__ = ["run_init"]


def run_init(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    Create config.yaml and local.yaml from the tracker.

    Args:
        console: Console for output.
        ctx: Command context.
        args: Parsed arguments (source, team, user, force).

    Returns:
        Exit code.
    """
    source_type = SourceType.from_string(args.source)
    console.header(f"Initializing TeamTack for {source_type.value}")

    bootstrap = Config(source=SourceConfig(type=source_type))
    source = create_task_source(bootstrap, load_credentials(ctx.env_file), dry_run=ctx.dry_run)
    try:
        config, local = InitWorkflow(source, ctx.store).run(
            InitOptions(
                source_type=source_type, team=args.team, user=args.user, force=args.force
            )
        )
    finally:
        source.close()

    ctx.paths.output_dir.mkdir(parents=True, exist_ok=True)

    console.success(f"Wrote {ctx.paths.config_file}")
    console.success(f"Wrote {ctx.paths.local_file}")
    console.detail(
        f"{len(config.teams)} teams, {len(config.users)} users, "
        f"{len(config.statuses)} statuses, {len(config.labels)} labels"
    )
    console.info(f"Team: {local.team}  User: {local.current_user}")
    if config.current_cycle:
        console.info(f"Current cycle: {config.current_cycle.name}")
    console.detail("Next: ttt sync")
    return ExitCode.SUCCESS
