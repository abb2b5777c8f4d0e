"""Nginx reverse-proxy server block generation."""

from dataclasses import dataclass, field
from textwrap import dedent, indent

DEFAULT_LISTEN_PORT = 80
DEFAULT_MAIN_APP_PORT = 3000


@dataclass(frozen=True)
class NginxLocation:
    path: str
    proxy_pass: str | None = None
    is_static: bool = False
    # Accepted for static locations; the block still proxies to the main app.
    root: str | None = None


@dataclass(frozen=True)
class NginxConfigInput:
    domain: str
    locations: list[NginxLocation] = field(default_factory=list)
    port: int | None = None
    main_app_port: int | None = None


def local_proxy_directives(port: int) -> str:
    return dedent(f"""
        proxy_pass http://localhost:{port};
        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection 'upgrade';
        proxy_set_header Host $host;
        proxy_cache_bypass $http_upgrade;
    """).strip()


def upstream_proxy_directives(proxy_pass: str) -> str:
    return dedent(f"""
        proxy_pass {proxy_pass};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    """).strip()


def location_block(path: str, body: str) -> str:
    return f"location {path} {{\n{indent(body, '    ')}\n}}"


def sort_locations(locations) -> list[NginxLocation]:
    """Longest path first, so specific prefixes come before shorter ones.

    Ties are broken on every field, making the output independent of input
    order even for duplicate paths.
    """
    return sorted(
        locations,
        key=lambda loc: (
            -len(loc.path),
            loc.path,
            loc.proxy_pass or "",
            loc.is_static,
            loc.root or "",
        ),
    )


def generate_nginx_config(config: NginxConfigInput) -> str:
    """Render one ``server`` block for ``config.domain``.

    Static locations and the implicit ``/`` location proxy to the main app
    port; locations with ``proxy_pass`` proxy to that upstream; anything else
    gets a placeholder comment. No validation is done.
    """
    port = config.port or DEFAULT_LISTEN_PORT
    main_app_port = config.main_app_port or DEFAULT_MAIN_APP_PORT
    locations = sort_locations(config.locations)

    blocks = []
    for loc in locations:
        if loc.is_static:
            body = local_proxy_directives(main_app_port)
        elif loc.proxy_pass:
            body = upstream_proxy_directives(loc.proxy_pass)
        else:
            body = "# No configuration provided for this location"
        blocks.append(location_block(loc.path, body))

    if not any(loc.path == "/" for loc in locations):
        blocks.append(location_block("/", local_proxy_directives(main_app_port)))

    header = dedent(f"""
        listen {port};
        listen [::]:{port};
        server_name {config.domain};

        # Logging
        access_log /var/log/nginx/{config.domain}.access.log;
        error_log /var/log/nginx/{config.domain}.error.log;
    """).strip()
    body = "\n\n".join([header, *blocks])
    return f"server {{\n{indent(body, '    ')}\n}}\n"


def parse_location(value: str, *, static: bool = False) -> NginxLocation:
    """Parse ``PATH`` or ``PATH=UPSTREAM`` as given on the command line."""
    path, _, upstream = value.partition("=")
    return NginxLocation(path=path, proxy_pass=upstream or None, is_static=static)
