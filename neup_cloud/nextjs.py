"""Next.js app commands, run under supervisord."""

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

BUILD_MAX_OLD_SPACE_MB = 1400


def _start_script(
    context: CommandContext, command: supervisor.Parts, environment: dict
) -> str:
    return "\n\n".join(
        [
            supervisor.ensure_installed_script(),
            supervisor.write_program_script(
                context.app_name,
                context.app_location,
                command,
                environment,
                startsecs=None,
            ),
        ]
    )


def get_commands(context: CommandContext) -> list[CommandDefinition]:
    location = quote(context.app_location)
    port_finder = get_port_finder_script(context.preferred_ports)
    if context.preferred_ports:
        start_cmd = ("npm start -- -p ", supervisor.CHOSEN_PORT)
        start_env = {"PORT": supervisor.CHOSEN_PORT, "NODE_ENV": "production"}
        dev_env = {"PORT": supervisor.CHOSEN_PORT}
    else:
        start_cmd = "npm start"
        start_env = {"NODE_ENV": "production"}
        dev_env = {}

    return [
        CommandDefinition(
            title="Build",
            description="Build the application for production",
            icon=Icon.HAMMER,
            command=CommandScript(
                pre_command=f"cd {location} && npm install && rm -rf .next",
                main_command=(
                    f"cd {location} && "
                    f'NODE_OPTIONS="--max-old-space-size={BUILD_MAX_OLD_SPACE_MB}" npm run build'
                ),
            ),
        ),
        CommandDefinition(
            title="Start",
            description="Start the application in production mode using Supervisor",
            icon=Icon.PLAY_CIRCLE,
            type="success",
            command=CommandScript(
                pre_command=port_finder,
                main_command=_start_script(context, start_cmd, start_env),
            ),
        ),
        CommandDefinition(
            title="Dev",
            description="Start the application in development mode using Supervisor",
            icon=Icon.TERMINAL,
            command=CommandScript(
                pre_command=port_finder,
                main_command=_start_script(context, "npm run dev", dev_env),
            ),
        ),
        CommandDefinition(
            title="Stop",
            description="Stop the running application",
            icon=Icon.STOP_CIRCLE,
            type="destructive",
            command=CommandScript(
                main_command=supervisor.remove_program_script(context.app_name),
            ),
        ),
    ]


def get_all_commands(context: CommandContext) -> dict[str, CommandDefinition]:
    return keyed(get_commands(context))


def get_start_command(
    app_name: str, app_location: str, preferred_ports: tuple[int, ...] = ()
) -> str:
    context = CommandContext(app_name, app_location, tuple(preferred_ports))
    return find_script(get_commands(context), "Start")


def get_dev_command(
    app_name: str, app_location: str, preferred_ports: tuple[int, ...] = ()
) -> str:
    context = CommandContext(app_name, app_location, tuple(preferred_ports))
    return find_script(get_commands(context), "Dev")


def get_build_command(app_location: str) -> str:
    return find_script(get_commands(CommandContext("", app_location)), "Build")
