from typing import Callable, Literal

from . import git, golang, nextjs, node, pyapp
from .commands import CommandContext, CommandDefinition, keyed
from .console import error
from .store import AppRecord

RuntimeName = Literal["node", "python", "go", "nextjs"]

Generator = Callable[[CommandContext], list[CommandDefinition]]

RUNTIMES: dict[str, Generator] = {
    "node": node.get_commands,
    "python": pyapp.get_commands,
    "go": golang.get_commands,
    "nextjs": nextjs.get_commands,
}

REQUIREMENTS: dict[str, Callable[[], str]] = {
    "node": node.get_requirements,
    "python": pyapp.get_requirements,
    "go": golang.get_requirements,
    "nextjs": node.get_requirements,
}


def get_generator(name: str) -> Generator:
    if name not in RUNTIMES:
        error(f"Unknown runtime: {name}. Available: {', '.join(RUNTIMES.keys())}")
    return RUNTIMES[name]


def get_requirements(name: str) -> str:
    if name not in REQUIREMENTS:
        error(f"Unknown runtime: {name}. Available: {', '.join(REQUIREMENTS.keys())}")
    return REQUIREMENTS[name]()


def command_context(app: AppRecord) -> CommandContext:
    return CommandContext(
        app_name=app.name,
        app_location=app.location,
        preferred_ports=tuple(app.preferred_ports),
        entry_file=app.entry_file,
    )


def git_context(app: AppRecord, target_ref: str | None = None) -> git.GitCommandContext:
    return git.GitCommandContext(
        app_location=app.location,
        repo_url=app.repo_url,
        branch=app.branch,
        target_ref=target_ref,
        key_path=app.key_path,
        is_private=app.is_private,
    )


def app_commands(
    app: AppRecord, target_ref: str | None = None
) -> dict[str, CommandDefinition]:
    """Runtime commands plus git commands when the app has a repository."""
    commands = get_generator(app.runtime)(command_context(app))
    if app.repo_url:
        commands += git.get_commands(git_context(app, target_ref))
    return keyed(commands)
