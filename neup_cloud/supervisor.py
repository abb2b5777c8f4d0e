"""Scripts that write, reload and remove supervisord programs."""

import shlex
from textwrap import dedent

from .commands import quote

CONF_DIR = "/etc/supervisor/conf.d"


class ShellVar(str):
    """A ``$NAME`` reference the shell expands when the program file is written."""


USER_NAME = ShellVar("$USER_NAME")
CHOSEN_PORT = ShellVar("$CHOSEN_PORT")


def shell_word(*parts: str) -> str:
    """Join ``parts`` into one shell word.

    Plain strings are quoted as literal text; only :class:`ShellVar` parts are
    left for the shell to expand.
    """
    words = []
    literal = ""
    for part in parts:
        if isinstance(part, ShellVar):
            if literal:
                words.append(shlex.quote(literal))
                literal = ""
            words.append(f'"{part}"')
        else:
            literal += part
    if literal or not words:
        words.append(shlex.quote(literal))
    return "".join(words)


def conf_path(app_name: str) -> str:
    return f"{CONF_DIR}/{app_name}.conf"


def ensure_installed_script() -> str:
    return dedent("""
        if ! command -v supervisorctl &> /dev/null; then
            echo "Supervisor not found. Installing..."
            sudo DEBIAN_FRONTEND=noninteractive apt-get update
            sudo DEBIAN_FRONTEND=noninteractive apt-get install -y supervisor
            sudo systemctl enable supervisor
            sudo systemctl start supervisor
        fi
        sudo mkdir -p /etc/supervisor/conf.d/
    """).strip()


Parts = str | tuple[str, ...]


def _parts(value: Parts) -> tuple[str, ...]:
    return value if isinstance(value, tuple) else (value,)


def program_config_parts(
    app_name: str,
    app_location: str,
    command: Parts,
    environment: dict[str, Parts],
    startsecs: int | None = 3,
) -> list[tuple[str, ...]]:
    """Lines of a ``[program:]`` section, each split into literal and variable parts.

    The process runs as ``$USER_NAME`` and logs into the app directory.
    """
    lines = [
        (f"[program:{app_name}]",),
        ("command=", *_parts(command)),
        (f"directory={app_location}",),
        ("user=", USER_NAME),
        ("autostart=true",),
        ("autorestart=true",),
    ]
    if startsecs is not None:
        lines.append((f"startsecs={startsecs}",))
    lines += [
        ("stopasgroup=true",),
        ("killasgroup=true",),
        (f"stderr_logfile={app_location}/terminal.error.log",),
        (f"stdout_logfile={app_location}/terminal.output.log",),
    ]
    if environment:
        env: list[str] = ["environment="]
        for i, (key, value) in enumerate(environment.items()):
            env += [("," if i else "") + f'{key}="', *_parts(value), '"']
        lines.append(tuple(env))
    return lines


def program_config_lines(
    app_name: str,
    app_location: str,
    command: Parts,
    environment: dict[str, Parts],
    startsecs: int | None = 3,
) -> list[str]:
    """The section as it reads once the shell has filled in the variables."""
    parts = program_config_parts(app_name, app_location, command, environment, startsecs)
    return ["".join(line) for line in parts]


def write_program_script(
    app_name: str,
    app_location: str,
    command: Parts,
    environment: dict[str, Parts],
    startsecs: int | None = 3,
) -> str:
    """Writes the program file with ``sudo tee`` and restarts it."""
    lines = program_config_parts(app_name, app_location, command, environment, startsecs)
    words = " \\\n    ".join(shell_word(*line) for line in lines)
    name = quote(app_name)
    return "\n".join(
        [
            f"CONF_FILE={quote(conf_path(app_name))}",
            "USER_NAME=$(whoami)",
            "",
            f"printf '%s\\n' \\\n    {words} \\\n    | sudo tee \"$CONF_FILE\" > /dev/null",
            "",
            "sudo supervisorctl reread",
            "sudo supervisorctl update",
            f"sudo supervisorctl restart {name}",
        ]
    )


def remove_program_script(app_name: str) -> str:
    name = quote(app_name)
    return "\n".join(
        [
            f"sudo supervisorctl stop {name}",
            f"sudo rm -f {quote(conf_path(app_name))}",
            "sudo supervisorctl reread",
            "sudo supervisorctl update",
        ]
    )


def restart_program_script(app_name: str) -> str:
    return f"sudo supervisorctl restart {quote(app_name)}"
