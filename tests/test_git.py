"""
Tests for the git repository command generators.
"""

import pytest

from neup_cloud import git
from neup_cloud.git import GitCommandContext

REPO = "https://github.com/acme/web.git"
KEY = "/home/deploy/.ssh/deploy_key"


@pytest.fixture
def public():
    return GitCommandContext(app_location="/srv/web", repo_url=REPO)


@pytest.fixture
def private():
    return GitCommandContext(
        app_location="/srv/web",
        repo_url="git@github.com:acme/web.git",
        key_path=KEY,
        is_private=True,
    )


class TestVariants:
    def test_get_commands_picks_public(self, public):
        titles = [c.title for c in git.get_commands(public)]
        assert titles == ["Clone Repository", "Pull Changes", "Force Pull", "Reset"]

    def test_private_commands_set_ssh_key(self, private):
        for cmd in git.get_commands(private):
            assert "export GIT_SSH_COMMAND=" in cmd.script
            assert KEY in cmd.script
            assert "StrictHostKeyChecking=no" in cmd.script

    def test_public_commands_never_reference_a_key(self, public):
        for cmd in git.get_commands(public):
            assert "GIT_SSH_COMMAND" not in cmd.script
            assert "ssh -i" not in cmd.script
            assert ".ssh" not in cmd.script

    def test_private_default_key_path(self):
        ctx = GitCommandContext(app_location="/srv/web", repo_url=REPO, is_private=True)
        assert git.DEFAULT_KEY_PATH in git.pull_private(ctx).script

    @pytest.mark.parametrize("is_private", [False, True])
    def test_destructive_classification(self, is_private):
        ctx = GitCommandContext(app_location="/srv/web", repo_url=REPO, is_private=is_private)
        types = {c.title: c.type for c in git.get_commands(ctx)}
        assert types == {
            "Clone Repository": "normal",
            "Pull Changes": "normal",
            "Force Pull": "destructive",
            "Reset": "destructive",
        }

    def test_keyed(self, public):
        assert set(git.get_all_commands(public)) == {
            "clone repository",
            "pull changes",
            "force pull",
            "reset",
        }


class TestClone:
    def test_clone_goes_through_temp_dir(self, public):
        script = git.clone_public(public).script
        assert 'TEMP_DIR="temp_clone_$(date +%s)"' in script
        assert f'git clone {REPO} "$TEMP_DIR"' in script
        assert "trap cleanup EXIT" in script
        assert 'rm -rf "$TEMP_DIR"' in script

    def test_clone_copies_hidden_files(self, public):
        script = git.clone_public(public).script
        assert script.index("shopt -s dotglob") < script.index('cp -rf "$TEMP_DIR"/* .')
        assert "shopt -u dotglob" in script

    def test_clone_creates_and_enters_target(self, public):
        script = git.clone_public(public).script
        assert script.index("mkdir -p /srv/web") < script.index("cd /srv/web")
        assert script.startswith("set -e")

    def test_clone_checks_missing_repo_url(self):
        script = git.clone_public(GitCommandContext(app_location="/srv/web")).script
        assert "if [ -z '' ]; then" in script
        assert "Repository URL is missing" in script

    def test_private_clone_checks_key(self, private):
        script = git.clone_private(private).script
        assert f"if [ ! -f {KEY} ]; then" in script
        assert f"chmod 600 {KEY}" in script
        assert script.index("export GIT_SSH_COMMAND") < script.index("git clone")

    def test_location_with_spaces_is_quoted(self):
        ctx = GitCommandContext(app_location="/srv/my web", repo_url=REPO)
        assert "cd '/srv/my web'" in git.clone_public(ctx).script


class TestPullAndReset:
    def test_pull_default_branch(self, public):
        assert git.pull(public).script == "set -e\ncd /srv/web\ngit pull origin main"

    def test_pull_branch(self):
        ctx = GitCommandContext(app_location="/srv/web", branch="develop")
        assert git.pull(ctx).script.endswith("git pull origin develop")

    def test_force_pull(self, public):
        lines = git.pull_force(public).script.splitlines()
        assert lines[-2:] == ["git fetch --all", "git reset --hard origin/main"]

    def test_reset_default_ref(self, public):
        assert git.reset(public).script.endswith("git reset --hard origin/main")

    def test_reset_ref(self):
        ctx = GitCommandContext(app_location="/srv/web", target_ref="a1b2c3d")
        assert git.reset(ctx).script.endswith("git reset --hard a1b2c3d")

    def test_private_pull_exports_key_before_pull(self, private):
        lines = git.pull_private(private).script.splitlines()
        assert lines[0] == "set -e"
        assert lines[1] == "cd /srv/web"
        assert lines[2] == (
            "export GIT_SSH_COMMAND='ssh -i /home/deploy/.ssh/deploy_key "
            "-o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null'"
        )
        assert lines[3] == "git pull origin main"
