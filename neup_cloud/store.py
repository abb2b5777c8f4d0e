"""Application records kept in a local JSON file."""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from .console import error, log, warn

DEFAULT_STORE = "neup.apps.json"


@dataclass
class AppRecord:
    name: str
    runtime: str
    location: str
    host: str
    ssh_user: str = "root"
    preferred_ports: list[int] = field(default_factory=list)
    entry_file: str | None = None
    repo_url: str | None = None
    branch: str | None = None
    key_path: str | None = None
    is_private: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "AppRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class AppStore:
    """Handle on the apps file; nothing is read until ``load()``."""

    def __init__(self, path: str | Path = DEFAULT_STORE):
        self.path = Path(path)
        self.apps: dict[str, AppRecord] = {}

    def load(self) -> "AppStore":
        if self.path.exists():
            data = json.loads(self.path.read_text())
            self.apps = {
                app["name"]: AppRecord.from_dict(app) for app in data.get("apps", [])
            }
        return self

    def save(self):
        data = {"apps": [asdict(app) for app in self.apps.values()]}
        self.path.write_text(json.dumps(data, indent=2))

    def get(self, name: str) -> AppRecord:
        if name not in self.apps:
            error(f"App '{name}' not found in {self.path}")
        return self.apps[name]

    def add(self, app: AppRecord):
        """Add or replace ``app``, warning on port clashes on the same host."""
        existing = self.apps.get(app.name)
        if existing and existing.runtime != app.runtime:
            warn(f"App '{app.name}' runtime changing from {existing.runtime} to {app.runtime}")

        for other in self.apps.values():
            if other.name == app.name or other.host != app.host:
                continue
            shared = sorted(set(other.preferred_ports) & set(app.preferred_ports))
            if shared:
                ports = ", ".join(str(p) for p in shared)
                warn(f"Ports {ports} also preferred by '{other.name}' on {app.host}")

        self.apps[app.name] = app
        log(f"{'Updated' if existing else 'Added'} app '{app.name}' ({app.runtime})")

    def remove(self, name: str) -> AppRecord:
        app = self.get(name)
        del self.apps[name]
        log(f"Removed app '{name}'")
        return app
