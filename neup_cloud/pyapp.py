"""Python app commands, run under pm2 with the python3 interpreter."""

from textwrap import dedent

from .commands import (
    CommandContext,
    CommandDefinition,
    CommandScript,
    Icon,
    find_script,
    keyed,
    quote,
)
from .ports import get_port_finder_script, port_env

DEFAULT_ENTRY_FILE = "main.py"


def get_commands(context: CommandContext) -> list[CommandDefinition]:
    location = quote(context.app_location)
    name = quote(context.app_name)
    entry_file = quote(context.entry_file or DEFAULT_ENTRY_FILE)

    return [
        CommandDefinition(
            title="Start",
            description="Start the Python application with pm2",
            icon=Icon.PLAY_CIRCLE,
            type="success",
            command=CommandScript(
                pre_command=get_port_finder_script(context.preferred_ports),
                main_command=(
                    f"cd {location} && {port_env(context.preferred_ports)}"
                    f"pm2 start {entry_file} --name {name} --interpreter python3"
                ),
            ),
        ),
        CommandDefinition(
            title="Stop",
            description="Stop the Python application and remove it from pm2",
            icon=Icon.STOP_CIRCLE,
            type="destructive",
            command=CommandScript(main_command=f"pm2 stop {name} && pm2 delete {name}"),
        ),
        CommandDefinition(
            title="Restart",
            description="Restart the Python application with latest changes",
            icon=Icon.REFRESH_CW,
            command=CommandScript(main_command=f"pm2 restart {name}"),
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


def get_requirements() -> str:
    """pm2 is used for Python apps too, so Node.js comes along with it."""
    return dedent("""
        set -e
        sudo apt-get update
        sudo apt-get install -y python3 python3-pip python3-venv
        if ! command -v pm2 &> /dev/null; then
            curl -fsSL https://deb.nodesource.com/setup_lts.x | sudo -E bash -
            sudo apt-get install -y nodejs
            sudo npm install -g pm2
        fi
    """).strip()
