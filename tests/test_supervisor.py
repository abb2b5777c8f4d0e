"""
Tests for supervisord program scripts.
"""

import os
import shutil
import subprocess

import pytest

from neup_cloud import golang, supervisor


class TestShellWord:
    def test_plain_text(self):
        assert supervisor.shell_word("autostart=true") == "autostart=true"

    def test_variable_stays_expandable(self):
        assert supervisor.shell_word("user=", supervisor.USER_NAME) == 'user="$USER_NAME"'

    def test_dollar_in_plain_text_is_literal(self):
        assert supervisor.shell_word("directory=/srv/$HOME/api") == "'directory=/srv/$HOME/api'"

    def test_metacharacters_are_quoted(self):
        assert supervisor.shell_word("directory=/srv/$(reboot)") == "'directory=/srv/$(reboot)'"

    def test_literals_around_variable(self):
        word = supervisor.shell_word('PORT="', supervisor.CHOSEN_PORT, '"')
        assert word == "'PORT=\"'\"$CHOSEN_PORT\"'\"'"

    def test_empty(self):
        assert supervisor.shell_word("") == "''"
        assert supervisor.shell_word() == "''"


class TestProgramConfig:
    def test_lines(self):
        lines = supervisor.program_config_lines(
            "api", "/srv/api", "./api", {"PORT": supervisor.CHOSEN_PORT}
        )
        assert lines == [
            "[program:api]",
            "command=./api",
            "directory=/srv/api",
            "user=$USER_NAME",
            "autostart=true",
            "autorestart=true",
            "startsecs=3",
            "stopasgroup=true",
            "killasgroup=true",
            "stderr_logfile=/srv/api/terminal.error.log",
            "stdout_logfile=/srv/api/terminal.output.log",
            'environment=PORT="$CHOSEN_PORT"',
        ]

    def test_several_environment_values(self):
        lines = supervisor.program_config_lines(
            "web", "/srv/web", "npm start", {"PORT": supervisor.CHOSEN_PORT, "NODE_ENV": "production"}
        )
        assert lines[-1] == 'environment=PORT="$CHOSEN_PORT",NODE_ENV="production"'

    def test_without_startsecs_or_environment(self):
        lines = supervisor.program_config_lines("web", "/srv/web", "npm run dev", {}, startsecs=None)
        assert not any(line.startswith("startsecs") for line in lines)
        assert not any(line.startswith("environment") for line in lines)

    def test_write_script_reloads_supervisor(self):
        script = supervisor.write_program_script("api", "/srv/api", "./api", {})
        lines = script.splitlines()
        assert lines[0] == "CONF_FILE=/etc/supervisor/conf.d/api.conf"
        assert lines[1] == "USER_NAME=$(whoami)"
        assert lines[3] == "printf '%s\\n' \\"
        assert '| sudo tee "$CONF_FILE" > /dev/null' in script
        assert lines[-3:] == [
            "sudo supervisorctl reread",
            "sudo supervisorctl update",
            "sudo supervisorctl restart api",
        ]

    def test_location_variables_are_not_expanded(self):
        script = supervisor.write_program_script("api", "/srv/$HOME/api", "./api", {})
        assert "'directory=/srv/$HOME/api'" in script
        assert "'stderr_logfile=/srv/$HOME/api/terminal.error.log'" in script

    def test_ensure_installed(self):
        script = supervisor.ensure_installed_script()
        assert script.startswith("if ! command -v supervisorctl")
        assert "sudo mkdir -p /etc/supervisor/conf.d/" in script


@pytest.mark.skipif(shutil.which("bash") is None, reason="needs bash")
class TestWrittenProgramFile:
    def run_start(self, tmp_path, location):
        conf = tmp_path / "program.conf"
        sudo = tmp_path / "bin" / "sudo"
        sudo.parent.mkdir()
        sudo.write_text('#!/bin/sh\nif [ "$1" = tee ]; then cat > "$CONF_OUT"; fi\n')
        sudo.chmod(0o755)
        env = dict(os.environ, PATH=f"{sudo.parent}:{os.environ['PATH']}", CONF_OUT=str(conf))
        script = golang.get_start_command("api", location, preferred_ports=(3999,))
        subprocess.run(["bash", "-c", script], env=env, check=True, capture_output=True)
        return conf.read_text()

    def test_location_written_verbatim(self, tmp_path):
        text = self.run_start(tmp_path, "/srv/$HOME/api")
        assert "directory=/srv/$HOME/api\n" in text
        assert "stderr_logfile=/srv/$HOME/api/terminal.error.log\n" in text

    def test_template_variables_expanded(self, tmp_path):
        text = self.run_start(tmp_path, "/srv/api")
        assert "user=$USER_NAME" not in text
        assert "$CHOSEN_PORT" not in text
        assert 'environment=PORT="' in text
