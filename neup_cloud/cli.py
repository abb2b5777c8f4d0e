"""Manage apps on VPS hosts with generated scripts.

Usage: neup <noun> <verb> [options]

Examples:
    neup app add api --runtime node --location /srv/api --host 203.0.113.5 --ports 3000
    neup app show api start
    neup app run api start
    neup nginx generate example.com --location /api=http://127.0.0.1:4000
"""

import cyclopts
from rich import print

from . import runtimes
from .commands import CommandDefinition, quote
from .console import echo, error, log, warn
from .nginx import NginxConfigInput, generate_nginx_config, parse_location
from .remote import make_executor, run_definition, ssh_script, ssh_write_file
from .runtimes import RuntimeName
from .store import DEFAULT_STORE, AppRecord, AppStore
from .variables import TemplateResolver, sanitize_app_name

app = cyclopts.App(name="neup", help="Manage apps on VPS hosts", sort_key=None)

app_app = cyclopts.App(name="app", help="Manage applications and run their commands", sort_key=1)
nginx_app = cyclopts.App(name="nginx", help="Generate and install nginx configs", sort_key=2)
requirements_app = cyclopts.App(
    name="requirements", help="Provision runtime requirements on a host", sort_key=3
)

app.command(app_app)
app.command(nginx_app)
app.command(requirements_app)


def resolve_command(
    record: AppRecord, action: str, target_ref: str | None = None
) -> CommandDefinition:
    commands = runtimes.app_commands(record, target_ref=target_ref)
    key = action.lower()
    if key not in commands:
        error(f"Unknown action '{action}' for {record.name}. Available: {', '.join(commands)}")
    return commands[key]


def confirm(question: str) -> bool:
    return input(f"{question} (yes/no): ") == "yes"


@app_app.command(name="add")
def add_app(
    name: str,
    *,
    runtime: RuntimeName,
    location: str,
    host: str,
    ssh_user: str = "root",
    ports: list[int] | None = None,
    entry_file: str | None = None,
    repo_url: str | None = None,
    branch: str | None = None,
    key_path: str | None = None,
    private: bool = False,
    store: str = DEFAULT_STORE,
):
    """Add or update an application record.

    :param name: App name (also the pm2/supervisor program name)
    :param runtime: App runtime
    :param location: App directory on the host
    :param host: Host IP or name to SSH into
    :param ssh_user: SSH user for connection
    :param ports: Preferred ports, tried in order on start
    :param entry_file: Entry file (runtime default if omitted)
    :param repo_url: Git repository URL, enables git commands
    :param branch: Git branch to pull (default: main)
    :param key_path: Deploy key on the host for private repositories
    :param private: Repository needs the deploy key
    :param store: Apps file
    """
    safe_name = sanitize_app_name(name)
    if safe_name != name:
        warn(f"'{name}' may not work as a pm2/supervisor program name, consider '{safe_name}'")

    s = AppStore(store).load()
    s.add(
        AppRecord(
            name=name,
            runtime=runtime,
            location=location,
            host=host,
            ssh_user=ssh_user,
            preferred_ports=list(ports or []),
            entry_file=entry_file,
            repo_url=repo_url,
            branch=branch,
            key_path=key_path,
            is_private=private,
        )
    )
    s.save()


@app_app.command(name="list")
def list_apps(*, store: str = DEFAULT_STORE):
    """List application records.

    :param store: Apps file
    """
    s = AppStore(store).load()
    if not s.apps:
        print(f"No apps in {s.path}")
        return
    for record in s.apps.values():
        ports = ", ".join(str(p) for p in record.preferred_ports)
        port_info = f" (ports {ports})" if ports else ""
        print(f"  - {record.name}: {record.runtime} at {record.host}:{record.location}{port_info}")


@app_app.command(name="remove")
def remove_app(name: str, *, store: str = DEFAULT_STORE):
    """Remove an application record. Nothing is changed on the host.

    :param name: App name
    :param store: Apps file
    """
    s = AppStore(store).load()
    s.remove(name)
    s.save()


@app_app.command(name="commands")
def list_commands(name: str, *, store: str = DEFAULT_STORE):
    """List the actions available for an app.

    :param name: App name
    :param store: Apps file
    """
    record = AppStore(store).load().get(name)
    for key, cmd in runtimes.app_commands(record).items():
        marker = " [red](destructive)[/red]" if cmd.is_destructive else ""
        print(f"  {key}: {cmd.description}{marker}")


@app_app.command(name="show")
def show_command(
    name: str, action: str, *, ref: str | None = None, store: str = DEFAULT_STORE
):
    """Print the script an action would run.

    :param name: App name
    :param action: Action title, e.g. start, stop, "pull changes"
    :param ref: Target ref for reset (default: origin/main)
    :param store: Apps file
    """
    record = AppStore(store).load().get(name)
    echo(resolve_command(record, action, target_ref=ref).script)


@app_app.command(name="run")
def run_command(
    name: str,
    action: str,
    *,
    ref: str | None = None,
    force: bool = False,
    store: str = DEFAULT_STORE,
):
    """Run an action on the app's host.

    :param name: App name
    :param action: Action title, e.g. start, stop, "pull changes"
    :param ref: Target ref for reset (default: origin/main)
    :param force: Skip confirmation for destructive actions
    :param store: Apps file
    """
    record = AppStore(store).load().get(name)
    cmd = resolve_command(record, action, target_ref=ref)

    if cmd.is_destructive and not force:
        print(f"[yellow]{cmd.title}:[/yellow] {cmd.description}")
        if not confirm(f"Run '{cmd.title}' for {record.name} on {record.host}?"):
            log("Cancelled")
            return

    resolver = TemplateResolver(
        {"app.name": record.name, "app.location": record.location},
        executor=make_executor(record.host, record.ssh_user),
    )
    echo(run_definition(record.host, cmd, user=record.ssh_user, resolver=resolver))


def build_nginx_config(
    domain: str,
    location: list[str] | None,
    static: list[str] | None,
    port: int | None,
    main_port: int | None,
) -> str:
    locations = [parse_location(loc) for loc in location or []]
    locations += [parse_location(path, static=True) for path in static or []]
    return generate_nginx_config(
        NginxConfigInput(
            domain=domain, locations=locations, port=port, main_app_port=main_port
        )
    )


@nginx_app.command(name="generate")
def generate_nginx(
    domain: str,
    *,
    location: list[str] | None = None,
    static: list[str] | None = None,
    port: int | None = None,
    main_port: int | None = None,
):
    """Print an nginx server block.

    :param domain: Server name
    :param location: PATH=UPSTREAM proxy rule, or bare PATH for a placeholder
    :param static: Path served by the main app on this host
    :param port: Listen port (default: 80)
    :param main_port: Local app port (default: 3000)
    """
    echo(build_nginx_config(domain, location, static, port, main_port).rstrip("\n"))


@nginx_app.command(name="install")
def install_nginx(
    host: str,
    domain: str,
    *,
    location: list[str] | None = None,
    static: list[str] | None = None,
    port: int | None = None,
    main_port: int | None = None,
    ssh_user: str = "root",
):
    """Write the server block to a host, test it and reload nginx.

    :param host: Host IP or name
    :param domain: Server name
    :param location: PATH=UPSTREAM proxy rule, or bare PATH for a placeholder
    :param static: Path served by the main app on this host
    :param port: Listen port (default: 80)
    :param main_port: Local app port (default: 3000)
    :param ssh_user: SSH user for connection
    """
    server_block = build_nginx_config(domain, location, static, port, main_port)

    log(f"Installing nginx config for {domain} on {host}...")
    ssh_script(
        host,
        "command -v nginx > /dev/null || (apt-get update && apt-get install -y nginx)",
        user=ssh_user,
    )
    site = f"/etc/nginx/sites-available/{domain}"
    ssh_write_file(host, site, server_block, user=ssh_user)
    ssh_script(
        host,
        f"ln -sf {quote(site)} /etc/nginx/sites-enabled/ && "
        "nginx -t && systemctl reload nginx",
        user=ssh_user,
    )
    log(f"Nginx configured for {domain}")


@requirements_app.command(name="show")
def show_requirements(runtime: RuntimeName):
    """Print the provisioning script for a runtime.

    :param runtime: App runtime
    """
    echo(runtimes.get_requirements(runtime))


@requirements_app.command(name="install")
def install_requirements(host: str, runtime: RuntimeName, *, ssh_user: str = "root"):
    """Install a runtime's requirements on a host.

    :param host: Host IP or name
    :param runtime: App runtime
    :param ssh_user: SSH user for connection
    """
    log(f"Installing {runtime} requirements on {host}...")
    echo(ssh_script(host, runtimes.get_requirements(runtime), user=ssh_user))
    log("Requirements installed")


def main():
    app()


if __name__ == "__main__":
    main()
