"""Run generated scripts on a host over SSH."""

import base64

from fabric import Connection

from .commands import CommandDefinition, quote
from .console import error, log
from .variables import Executor, TemplateResolver

CONNECT_TIMEOUT = 10


def connect(host: str, user: str = "root") -> Connection:
    return Connection(
        host,
        user=user,
        connect_kwargs={"look_for_keys": True, "timeout": CONNECT_TIMEOUT},
    )


def ssh(host: str, cmd: str, user: str = "root") -> str:
    with connect(host, user) as c:
        result = c.run(cmd, hide=True, warn=True)
        if result.failed:
            error(f"SSH command failed: {result.stderr}")
        return result.stdout


def ssh_script(host: str, script: str, user: str = "root") -> str:
    """Runs ``script`` under bash, which the generated scripts require."""
    with connect(host, user) as c:
        escaped = script.replace("'", "'\\''")
        result = c.run(f"bash -c '{escaped}'", hide=True, warn=True)
        if result.failed:
            error(f"SSH script failed: {result.stderr}")
        return result.stdout


def ssh_write_file(host: str, path: str, content: str, user: str = "root"):
    """Uses base64 encoding to avoid heredoc and escaping issues."""
    encoded = base64.b64encode(content.encode()).decode()
    ssh(host, f"echo '{encoded}' | base64 -d > {quote(path)}", user=user)


def make_executor(host: str, user: str = "root") -> Executor:
    """:return: callable giving a probe's stdout, or None if the probe failed"""

    def execute(cmd: str) -> str | None:
        with connect(host, user) as c:
            result = c.run(cmd, hide=True, warn=True)
            if result.failed or not result.stdout:
                return None
            return result.stdout

    return execute


def run_definition(
    host: str,
    definition: CommandDefinition,
    user: str = "root",
    resolver: TemplateResolver | None = None,
) -> str:
    script = definition.script
    if resolver is not None:
        script = resolver.process(script)
    log(f"Running '{definition.title}' on {host}...")
    output = ssh_script(host, script, user=user)
    log(f"'{definition.title}' finished")
    return output
