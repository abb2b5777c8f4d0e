"""Git repository commands, each with a public (HTTPS) and private (SSH key) variant.

Clones go into a temporary directory inside the app location and are then
copied over it, hidden files included, so cloning into a non-empty app
directory works. Private variants point ``GIT_SSH_COMMAND`` at a deploy key
with host key checking disabled.
"""

from dataclasses import dataclass
from textwrap import dedent

from .commands import CommandDefinition, CommandScript, Icon, keyed, quote

DEFAULT_BRANCH = "main"
DEFAULT_TARGET_REF = "origin/main"
DEFAULT_KEY_PATH = "/root/.ssh/id_ed25519"


@dataclass(frozen=True)
class GitCommandContext:
    app_location: str
    repo_url: str | None = None
    branch: str | None = None
    target_ref: str | None = None
    key_path: str | None = None
    is_private: bool = False


def git_ssh_command(key_path: str) -> str:
    return (
        f"ssh -i {quote(key_path)} "
        "-o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null"
    )


def _export_key(key_path: str) -> str:
    return f"export GIT_SSH_COMMAND={quote(git_ssh_command(key_path))}"


def _clone_body(repo_url: str, failure: str, success: str) -> str:
    return dedent(f"""
        TEMP_DIR="temp_clone_$(date +%s)"

        cleanup() {{
          rm -rf "$TEMP_DIR"
        }}
        trap cleanup EXIT

        echo "Cloning repository..."
        if ! git clone {quote(repo_url)} "$TEMP_DIR"; then
          echo "{failure}"
          exit 1
        fi

        shopt -s dotglob
        cp -rf "$TEMP_DIR"/* .
        shopt -u dotglob

        echo "{success}"
    """).strip()


def get_public_clone_command(app_location: str, repo_url: str) -> str:
    location = quote(app_location)
    header = dedent(f"""
        set -e

        if [ -z {quote(repo_url)} ]; then
          echo "ERROR: Repository URL is missing"
          exit 1
        fi

        mkdir -p {location}
        cd {location}
    """).strip()
    body = _clone_body(repo_url, "Git clone failed", "Clone completed successfully")
    return f"{header}\n\n{body}"


def get_private_clone_command(app_location: str, repo_url: str, key_path: str) -> str:
    location = quote(app_location)
    key = quote(key_path)
    header = dedent(f"""
        set -e

        if [ ! -f {key} ]; then
          echo "ERROR: SSH key not found at "{key}
          exit 1
        fi

        chmod 600 {key}

        mkdir -p {location}
        cd {location}
    """).strip()
    body = _clone_body(
        repo_url,
        "Private git clone failed (check SSH key & repo access)",
        "Private clone completed successfully",
    )
    return f"{header}\n\n{_export_key(key_path)}\n\n{body}"


def _in_repo(app_location: str, *lines: str, key_path: str | None = None) -> str:
    script = ["set -e", f"cd {quote(app_location)}"]
    if key_path is not None:
        script.append(_export_key(key_path))
    script.extend(lines)
    return "\n".join(script)


def get_pull_command(app_location: str, branch: str) -> str:
    return _in_repo(app_location, f"git pull origin {quote(branch)}")


def get_private_pull_command(app_location: str, key_path: str, branch: str) -> str:
    return _in_repo(app_location, f"git pull origin {quote(branch)}", key_path=key_path)


def get_pull_force_command(app_location: str, branch: str) -> str:
    return _in_repo(
        app_location, "git fetch --all", f"git reset --hard {quote('origin/' + branch)}"
    )


def get_private_pull_force_command(app_location: str, key_path: str, branch: str) -> str:
    return _in_repo(
        app_location,
        "git fetch --all",
        f"git reset --hard {quote('origin/' + branch)}",
        key_path=key_path,
    )


def get_reset_command(app_location: str, target_ref: str) -> str:
    return _in_repo(app_location, "git fetch --all", f"git reset --hard {quote(target_ref)}")


def get_private_reset_command(app_location: str, key_path: str, target_ref: str) -> str:
    return _in_repo(
        app_location,
        "git fetch --all",
        f"git reset --hard {quote(target_ref)}",
        key_path=key_path,
    )


def clone_public(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Clone Repository",
        description="Clone the repository from GitHub",
        icon=Icon.GIT_BRANCH,
        command=CommandScript(
            main_command=get_public_clone_command(
                context.app_location, context.repo_url or ""
            ),
        ),
    )


def pull(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Pull Changes",
        description="Pull latest changes from the repository",
        icon=Icon.DOWNLOAD,
        command=CommandScript(
            main_command=get_pull_command(
                context.app_location, context.branch or DEFAULT_BRANCH
            ),
        ),
    )


def pull_force(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Force Pull",
        description="Force pull and overwrite local changes",
        icon=Icon.DOWNLOAD,
        type="destructive",
        command=CommandScript(
            main_command=get_pull_force_command(
                context.app_location, context.branch or DEFAULT_BRANCH
            ),
        ),
    )


def reset(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Reset",
        description="Reset to a specific commit or branch",
        icon=Icon.ROTATE_CCW,
        type="destructive",
        command=CommandScript(
            main_command=get_reset_command(
                context.app_location, context.target_ref or DEFAULT_TARGET_REF
            ),
        ),
    )


def clone_private(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Clone Repository",
        description="Clone private repository using SSH key",
        icon=Icon.GIT_BRANCH,
        command=CommandScript(
            main_command=get_private_clone_command(
                context.app_location,
                context.repo_url or "",
                context.key_path or DEFAULT_KEY_PATH,
            ),
        ),
    )


def pull_private(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Pull Changes",
        description="Pull latest changes from private repository",
        icon=Icon.DOWNLOAD,
        command=CommandScript(
            main_command=get_private_pull_command(
                context.app_location,
                context.key_path or DEFAULT_KEY_PATH,
                context.branch or DEFAULT_BRANCH,
            ),
        ),
    )


def pull_force_private(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Force Pull",
        description="Force pull from private repository",
        icon=Icon.DOWNLOAD,
        type="destructive",
        command=CommandScript(
            main_command=get_private_pull_force_command(
                context.app_location,
                context.key_path or DEFAULT_KEY_PATH,
                context.branch or DEFAULT_BRANCH,
            ),
        ),
    )


def reset_private(context: GitCommandContext) -> CommandDefinition:
    return CommandDefinition(
        title="Reset",
        description="Reset private repository to a ref",
        icon=Icon.ROTATE_CCW,
        type="destructive",
        command=CommandScript(
            main_command=get_private_reset_command(
                context.app_location,
                context.key_path or DEFAULT_KEY_PATH,
                context.target_ref or DEFAULT_TARGET_REF,
            ),
        ),
    )


PUBLIC_COMMANDS = (clone_public, pull, pull_force, reset)
PRIVATE_COMMANDS = (clone_private, pull_private, pull_force_private, reset_private)


def get_commands(context: GitCommandContext) -> list[CommandDefinition]:
    generators = PRIVATE_COMMANDS if context.is_private else PUBLIC_COMMANDS
    return [generate(context) for generate in generators]


def get_all_commands(context: GitCommandContext) -> dict[str, CommandDefinition]:
    return keyed(get_commands(context))
