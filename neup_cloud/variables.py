"""``{{name}}`` placeholder resolution for scripts sent to Linux or Windows hosts."""

import re
from typing import Callable

from .console import warn

Executor = Callable[[str], "str | None"]

PLACEHOLDER_RE = re.compile(r"\{\{([a-zA-Z0-9_.]+)\}\}")

LINUX_PROBES = {
    "os.availableNetworkPort_random": (
        "while :; do port=$(shuf -i 1024-65535 -n 1); "
        'ss -lpn | grep -q ":$port " || { echo $port; break; }; done'
    ),
    "os.availableNetworkPort_first": (
        "for port in $(seq 1024 65535); do "
        'ss -lpn | grep -q ":$port " || { echo $port; break; }; done'
    ),
    "os.availableNetworkPort_last": (
        "for port in $(seq 65535 -1 1024); do "
        'ss -lpn | grep -q ":$port " || { echo $port; break; }; done'
    ),
    "os.ramUsed": "free -m | awk 'NR==2 {print $3}'",
    "os.ramFree": "free -m | awk 'NR==2 {print $4}'",
    "os.ramTotal": "free -m | awk 'NR==2 {print $2}'",
}


def powershell(*statements: str) -> str:
    """Wrap statements for the default Windows OpenSSH shell (cmd)."""
    body = "; ".join(statements).replace('"', '\\"')
    return f'powershell -NoProfile -Command "{body}"'


_PORT_IN_USE = "$used = Get-NetTCPConnection -LocalPort $port -ErrorAction SilentlyContinue"
_OS_INFO = "$os = Get-CimInstance Win32_OperatingSystem"

WINDOWS_PROBES = {
    "os.availableNetworkPort_random": powershell(
        f"do {{ $port = Get-Random -Minimum 1024 -Maximum 65536; {_PORT_IN_USE} }} while ($used)",
        "Write-Output $port",
    ),
    "os.availableNetworkPort_first": powershell(
        f"for ($port = 1024; $port -le 65535; $port++) {{ {_PORT_IN_USE}; "
        "if (-not $used) { Write-Output $port; break } }",
    ),
    "os.availableNetworkPort_last": powershell(
        f"for ($port = 65535; $port -ge 1024; $port--) {{ {_PORT_IN_USE}; "
        "if (-not $used) { Write-Output $port; break } }",
    ),
    "os.ramUsed": powershell(
        _OS_INFO,
        "Write-Output ([math]::Round(($os.TotalVisibleMemorySize - $os.FreePhysicalMemory) / 1024))",
    ),
    "os.ramFree": powershell(_OS_INFO, "Write-Output ([math]::Round($os.FreePhysicalMemory / 1024))"),
    "os.ramTotal": powershell(
        _OS_INFO, "Write-Output ([math]::Round($os.TotalVisibleMemorySize / 1024))"
    ),
}

PROBES = {"linux": LINUX_PROBES, "windows": WINDOWS_PROBES}


class TemplateResolver:
    """Fills placeholders from static variables first, then host probes.

    Placeholders that resolve to nothing, or to an empty string, are left as
    they are.
    """

    def __init__(
        self,
        variables: dict | None = None,
        executor: Executor | None = None,
        platform: str = "linux",
    ):
        if platform not in PROBES:
            raise ValueError(f"Unknown platform: {platform}. Available: {', '.join(PROBES)}")
        self.variables = dict(variables or {})
        self.executor = executor
        self.probes = PROBES[platform]

    def resolve_dynamic(self, name: str) -> str | None:
        probe = self.probes.get(name)
        if probe is None or self.executor is None:
            return None
        try:
            output = self.executor(probe)
        except Exception as e:
            warn(f"Could not resolve {{{{{name}}}}}: {e}")
            return None
        return (output or "").strip() or None

    def process(self, template: str) -> str:
        keys = set(PLACEHOLDER_RE.findall(template))
        if not keys:
            return template

        replacements = {}
        for key in keys:
            if key in self.variables:
                value = str(self.variables[key])
            else:
                value = self.resolve_dynamic(key)
            if value:
                replacements[key] = value

        return PLACEHOLDER_RE.sub(
            lambda m: replacements.get(m.group(1), m.group(0)), template
        )


def sanitize_app_name(name: str) -> str:
    """Make ``name`` safe as a pm2 or supervisord program name."""
    if not name:
        return "app"
    name = name[:16].replace(" ", "_").lower()
    return re.sub(r"[^a-z0-9_]", "", name)
