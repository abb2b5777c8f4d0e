"""Command definitions: a named, typed action plus the script that performs it."""

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Literal

Status = Literal["published", "unpublished"]
CommandType = Literal["normal", "destructive", "success"]


class Icon(str, Enum):
    GIT_BRANCH = "GitBranch"
    DOWNLOAD = "Download"
    ROTATE_CCW = "RotateCcw"
    HAMMER = "Hammer"
    PLAY_CIRCLE = "PlayCircle"
    STOP_CIRCLE = "StopCircle"
    REFRESH_CW = "RefreshCw"
    TERMINAL = "Terminal"
    PACKAGE = "Package"


@dataclass(frozen=True)
class CommandScript:
    main_command: str
    pre_command: str | None = None
    post_command: str | None = None


@dataclass(frozen=True)
class CommandDefinition:
    title: str
    description: str
    icon: Icon
    command: CommandScript
    status: Status = "published"
    type: CommandType = "normal"

    @property
    def key(self) -> str:
        return self.title.lower()

    @property
    def is_destructive(self) -> bool:
        return self.type == "destructive"

    @property
    def script(self) -> str:
        """Pre, main and post phases joined into the text sent to a host."""
        phases = [
            self.command.pre_command,
            self.command.main_command,
            self.command.post_command,
        ]
        return "\n".join(p.strip("\n") for p in phases if p and p.strip())


@dataclass(frozen=True)
class CommandContext:
    app_name: str
    app_location: str
    preferred_ports: tuple[int, ...] = ()
    entry_file: str | None = None


def keyed(commands: list[CommandDefinition]) -> dict[str, CommandDefinition]:
    """:return: commands keyed by lowercased title"""
    return {cmd.key: cmd for cmd in commands}


def find_script(commands: list[CommandDefinition], title: str) -> str:
    """:return: full script of the command with ``title``, or "" if absent"""
    cmd = next((c for c in commands if c.title == title), None)
    return cmd.script if cmd else ""


def quote(value: str | int) -> str:
    return shlex.quote(str(value))
