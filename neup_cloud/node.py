"""Node.js app commands, run under pm2."""

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

DEFAULT_ENTRY_FILE = "index.js"


def get_commands(context: CommandContext) -> list[CommandDefinition]:
    location = quote(context.app_location)
    name = quote(context.app_name)
    entry_file = quote(context.entry_file or DEFAULT_ENTRY_FILE)

    return [
        CommandDefinition(
            title="Build",
            description="Install dependencies and build the application",
            icon=Icon.HAMMER,
            command=CommandScript(
                main_command=(
                    f"cd {location} && npm install && "
                    """if grep -q '"build":' package.json; then npm run build; fi"""
                ),
            ),
        ),
        CommandDefinition(
            title="Start",
            description="Start the application with pm2",
            icon=Icon.PLAY_CIRCLE,
            type="success",
            command=CommandScript(
                pre_command=get_port_finder_script(context.preferred_ports),
                main_command=(
                    f"cd {location} && npm install && "
                    f"{port_env(context.preferred_ports)}pm2 start {entry_file} --name {name}"
                ),
            ),
        ),
        CommandDefinition(
            title="Stop",
            description="Stop the application and remove it from pm2",
            icon=Icon.STOP_CIRCLE,
            type="destructive",
            command=CommandScript(main_command=f"pm2 stop {name} && pm2 delete {name}"),
        ),
        CommandDefinition(
            title="Restart",
            description="Restart the application",
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


def get_build_command(app_location: str) -> str:
    return find_script(get_commands(CommandContext("", app_location)), "Build")


def get_requirements() -> str:
    """Installs Node.js LTS and pm2 on Ubuntu/Debian when missing."""
    return dedent("""
        set -e
        if ! command -v node &> /dev/null; then
            curl -fsSL https://deb.nodesource.com/setup_lts.x | sudo -E bash -
            sudo apt-get install -y nodejs
        fi
        node --version
        if ! command -v pm2 &> /dev/null; then
            sudo npm install -g pm2
        fi
    """).strip()
