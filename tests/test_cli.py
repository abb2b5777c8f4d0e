"""
Tests for the neup CLI commands, called directly.
"""

from unittest.mock import patch

import pytest

from neup_cloud import cli
from neup_cloud.store import AppStore


@pytest.fixture
def store(tmp_path):
    path = str(tmp_path / "apps.json")
    cli.add_app(
        "web",
        runtime="node",
        location="/srv/web",
        host="203.0.113.5",
        ports=[3000, 3001],
        repo_url="https://github.com/acme/web.git",
        store=path,
    )
    return path


class TestAppCommands:
    def test_add_persists_record(self, store):
        record = AppStore(store).load().get("web")
        assert record.runtime == "node"
        assert record.preferred_ports == [3000, 3001]
        assert not record.is_private

    def test_add_warns_on_unsafe_name(self, tmp_path):
        with patch("neup_cloud.cli.warn") as warn:
            cli.add_app(
                "Web App", runtime="go", location="/srv/w", host="h", store=str(tmp_path / "a.json")
            )
        assert "'web_app'" in warn.call_args.args[0]

    def test_add_safe_name_does_not_warn(self, tmp_path):
        with patch("neup_cloud.cli.warn") as warn:
            cli.add_app("api", runtime="go", location="/srv/a", host="h", store=str(tmp_path / "a.json"))
        warn.assert_not_called()

    def test_list(self, store, capsys):
        cli.list_apps(store=store)
        out = capsys.readouterr().out
        assert "web: node at 203.0.113.5:/srv/web (ports 3000, 3001)" in out

    def test_commands_lists_runtime_and_git(self, store, capsys):
        cli.list_commands("web", store=store)
        out = capsys.readouterr().out
        for key in ["build", "start", "stop", "restart", "clone repository", "reset"]:
            assert f"  {key}:" in out

    def test_show_prints_script(self, store, capsys):
        cli.show_command("web", "start", store=store)
        out = capsys.readouterr().out
        assert 'CHOSEN_PORT=$(find_port "3000 3001")' in out
        assert "pm2 start index.js --name web" in out

    def test_show_reset_ref(self, store, capsys):
        cli.show_command("web", "Reset", ref="v2.0.0", store=store)
        assert "git reset --hard v2.0.0" in capsys.readouterr().out

    def test_unknown_action_exits(self, store):
        with pytest.raises(SystemExit):
            cli.show_command("web", "deploy", store=store)

    def test_remove(self, store):
        cli.remove_app("web", store=store)
        assert AppStore(store).load().apps == {}


class TestRun:
    def test_runs_normal_command(self, store):
        with patch("neup_cloud.cli.run_definition", return_value="ok") as run:
            cli.run_command("web", "restart", store=store)
        host, definition = run.call_args.args
        assert host == "203.0.113.5"
        assert definition.title == "Restart"
        assert run.call_args.kwargs["user"] == "root"

    def test_destructive_needs_confirmation(self, store):
        with patch("neup_cloud.cli.run_definition") as run, patch(
            "builtins.input", return_value="no"
        ):
            cli.run_command("web", "force pull", store=store)
        run.assert_not_called()

    def test_destructive_confirmed(self, store):
        with patch("neup_cloud.cli.run_definition", return_value="") as run, patch(
            "builtins.input", return_value="yes"
        ):
            cli.run_command("web", "stop", store=store)
        assert run.call_args.args[1].title == "Stop"

    def test_force_skips_confirmation(self, store):
        with patch("neup_cloud.cli.run_definition", return_value="") as run, patch(
            "builtins.input"
        ) as ask:
            cli.run_command("web", "reset", force=True, store=store)
        ask.assert_not_called()
        assert "git reset --hard origin/main" in run.call_args.args[1].script


class TestNginx:
    def test_generate(self, capsys):
        cli.generate_nginx(
            "example.com",
            location=["/api=http://127.0.0.1:4000"],
            static=["/assets"],
            main_port=5000,
        )
        out = capsys.readouterr().out
        assert "server_name example.com;" in out
        assert "proxy_pass http://127.0.0.1:4000;" in out
        assert out.index("location /assets {") < out.index("location /api {")
        assert "proxy_pass http://localhost:5000;" in out

    def test_install_writes_and_reloads(self):
        with patch("neup_cloud.cli.ssh_script") as script, patch(
            "neup_cloud.cli.ssh_write_file"
        ) as write:
            cli.install_nginx("203.0.113.5", "example.com", main_port=4000)
        path, content = write.call_args.args[1:3]
        assert path == "/etc/nginx/sites-available/example.com"
        assert "proxy_pass http://localhost:4000;" in content
        assert "nginx -t && systemctl reload nginx" in script.call_args.args[1]

    def test_install_quotes_domain_in_shell(self):
        with patch("neup_cloud.cli.ssh_script") as script, patch("neup_cloud.cli.ssh_write_file"):
            cli.install_nginx("203.0.113.5", "x.com;reboot")
        link = script.call_args.args[1]
        assert link.startswith("ln -sf '/etc/nginx/sites-available/x.com;reboot' /etc/nginx/sites-enabled/")


class TestRequirements:
    def test_show(self, capsys):
        cli.show_requirements("python")
        assert "python3-venv" in capsys.readouterr().out

    def test_install(self):
        with patch("neup_cloud.cli.ssh_script", return_value="") as script:
            cli.install_requirements("203.0.113.5", "node", ssh_user="deploy")
        assert "npm install -g pm2" in script.call_args.args[1]
        assert script.call_args.kwargs["user"] == "deploy"
