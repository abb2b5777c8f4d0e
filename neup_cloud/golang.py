"""Go app commands; the built binary runs under supervisord."""

from textwrap import dedent

from . import supervisor
from .commands import (
    CommandContext,
    CommandDefinition,
    CommandScript,
    Icon,
    find_script,
    keyed,
    quote,
)
from .ports import get_port_finder_script

DEFAULT_ENTRY_FILE = "."


def get_commands(context: CommandContext) -> list[CommandDefinition]:
    location = quote(context.app_location)
    # The binary is named after the app
    binary = quote(context.app_name)
    entry_file = quote(context.entry_file or DEFAULT_ENTRY_FILE)
    environment = {"PORT": supervisor.CHOSEN_PORT} if context.preferred_ports else {}

    return [
        CommandDefinition(
            title="Build",
            description="Build the Go application",
            icon=Icon.HAMMER,
            command=CommandScript(
                main_command=(
                    f"cd {location} && "
                    "if [ -f go.mod ]; then go mod tidy; fi && "
                    f"go build -o {binary} {entry_file}"
                ),
            ),
        ),
        CommandDefinition(
            title="Start",
            description="Start the Go application using Supervisor",
            icon=Icon.PLAY_CIRCLE,
            type="success",
            command=CommandScript(
                pre_command=get_port_finder_script(context.preferred_ports),
                main_command=supervisor.write_program_script(
                    context.app_name,
                    context.app_location,
                    f"./{context.app_name}",
                    environment,
                ),
            ),
        ),
        CommandDefinition(
            title="Stop",
            description="Stop the Go application and remove its Supervisor program",
            icon=Icon.STOP_CIRCLE,
            type="destructive",
            command=CommandScript(
                main_command=supervisor.remove_program_script(context.app_name),
            ),
        ),
        CommandDefinition(
            title="Restart",
            description="Restart the Go application",
            icon=Icon.REFRESH_CW,
            command=CommandScript(
                main_command=supervisor.restart_program_script(context.app_name),
            ),
        ),
    ]


def get_all_commands(context: CommandContext) -> dict[str, CommandDefinition]:
    return keyed(get_commands(context))


def get_start_command(
    app_name: str,
    app_location: str,
    entry_file: str = DEFAULT_ENTRY_FILE,
    preferred_ports: tuple[int, ...] = (),
) -> str:
    context = CommandContext(app_name, app_location, tuple(preferred_ports), entry_file)
    return find_script(get_commands(context), "Start")


def get_stop_command(app_name: str) -> str:
    return find_script(get_commands(CommandContext(app_name, "")), "Stop")


def get_build_command(
    app_name: str, app_location: str, entry_file: str = DEFAULT_ENTRY_FILE
) -> str:
    context = CommandContext(app_name, app_location, entry_file=entry_file)
    return find_script(get_commands(context), "Build")


def get_requirements() -> str:
    return dedent("""
        set -e
        sudo apt-get update
        if ! command -v go &> /dev/null; then
            sudo apt-get install -y golang-go
        fi
        go version
        sudo apt-get install -y supervisor
    """).strip()
