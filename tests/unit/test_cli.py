"""
Unit tests for the command-line interface.
"""

import pytest

from myownwebserver import __main__ as cli
from myownwebserver.config import ConfigError


class FakeServer:
    """Records that the CLI tried to run a server."""

    instances = []

    def __init__(self, config):
        self.config = config
        self.ran = False
        FakeServer.instances.append(self)

    def run(self):
        self.ran = True


@pytest.fixture
def fake_server(monkeypatch):
    FakeServer.instances = []
    monkeypatch.setattr(cli, "WebServer", FakeServer)
    return FakeServer


def args_for(web_root, ip="127.0.0.1", port="8080"):
    return [f"-webRoot={web_root}", f"-webIP={ip}", f"-webPort={port}"]


class TestParseConfig:

    def test_valid_arguments(self, web_root):
        config = cli.parse_config(args_for(web_root))

        assert config.web_root == str(web_root)
        assert config.host == "127.0.0.1"
        assert config.port == 8080

    def test_any_order(self, web_root):
        argv = args_for(web_root)
        config = cli.parse_config([argv[2], argv[0], argv[1]])

        assert config.port == 8080

    def test_space_separated_value(self, web_root):
        # Still three tokens, so the count check passes
        with pytest.raises(ConfigError):
            cli.parse_config(["-webRoot", str(web_root), "-webIP=127.0.0.1"])

    @pytest.mark.parametrize("count", [0, 2, 4])
    def test_wrong_count(self, web_root, count):
        argv = (args_for(web_root) + ["-extra=1"])[:count]

        with pytest.raises(ConfigError, match="Please provide 3 command-line arguments."):
            cli.parse_config(argv)

    def test_duplicate_flag(self, web_root):
        argv = [f"-webRoot={web_root}", f"-webRoot={web_root}", "-webPort=8080"]

        with pytest.raises(ConfigError, match="more than once"):
            cli.parse_config(argv)

    def test_unknown_flag(self, web_root):
        argv = [f"-webRoot={web_root}", "-webIP=127.0.0.1", "-port=8080"]

        with pytest.raises(ConfigError, match="^Sorry"):
            cli.parse_config(argv)

    def test_invalid_values(self, web_root, tmp_path):
        with pytest.raises(ConfigError, match="webRoot does not exist"):
            cli.parse_config(args_for(tmp_path / "missing"))

        with pytest.raises(ConfigError, match="IPAddress is invalid"):
            cli.parse_config(args_for(web_root, ip="not-an-ip"))

        with pytest.raises(ConfigError, match="port is invalid"):
            cli.parse_config(args_for(web_root, port="eighty"))


class TestMain:

    def test_runs_server(self, web_root, fake_server):
        assert cli.main(args_for(web_root)) == 0

        assert len(fake_server.instances) == 1
        assert fake_server.instances[0].ran is True

    def test_error_printed_to_stdout(self, fake_server, capsys):
        assert cli.main(["-webRoot=x"]) == 1

        out = capsys.readouterr().out
        assert out.strip() == "Please provide 3 command-line arguments."
        assert fake_server.instances == []

    def test_invalid_root_does_not_start(self, tmp_path, fake_server, capsys):
        assert cli.main(args_for(tmp_path / "missing")) == 1

        assert "Sorry, the provided webRoot does not exist!" in capsys.readouterr().out
        assert fake_server.instances == []

    def test_bind_failure(self, web_root, monkeypatch, capsys):
        class FailingServer(FakeServer):
            def run(self):
                raise OSError("Address already in use")

        monkeypatch.setattr(cli, "WebServer", FailingServer)

        assert cli.main(args_for(web_root)) == 1
        assert "Address already in use" in capsys.readouterr().err
