"""Tests for the command line entry point."""

import json

import pytest

from conntrack_agent.main import ConntrackAgent, create_parser, main


@pytest.fixture
def config_file(tmp_path):
    """Write an INI file pointing at a fake netfilter directory."""

    def _write(collect_stats=False, **files):
        directory = tmp_path / "netfilter"
        directory.mkdir(exist_ok=True)
        for filename, content in files.items():
            (directory / filename).write_text(content)
        path = tmp_path / "config.ini"
        path.write_text(
            "[conntrack]\n"
            f"dirs = {directory}\n"
            f"collect_stats = {'true' if collect_stats else 'false'}\n"
            "[output]\n"
            f"file = {tmp_path / 'out.jsonl'}\n"
            "[logging]\n"
            f"log_file = {tmp_path / 'agent.log'}\n"
        )
        return str(path)

    return _write


class TestParser:

    def test_defaults(self):
        args = create_parser().parse_args([])
        assert args.mode == "collect"
        assert args.config is None
        assert args.output is None

    def test_invalid_mode(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--mode", "web"])


class TestMain:

    def test_collect_to_stdout(self, config_file, capsys):
        path = config_file(nf_conntrack_count="1234321")

        assert main(["-c", path]) == 0

        data = json.loads(capsys.readouterr().out)
        [measurement] = data['measurements']
        assert measurement['fields'] == {"ip_conntrack_count": 1234321.0}
        assert measurement['tags'] == {}
        assert data['errors'] == []

    def test_collect_to_file(self, config_file, tmp_path):
        path = config_file(nf_conntrack_max="65536")
        output = tmp_path / "result.json"

        assert main(["-c", path, "-o", str(output)]) == 0

        data = json.loads(output.read_text())
        assert data['measurements'][0]['fields'] == {"ip_conntrack_max": 65536.0}

    def test_collect_with_stats(self, config_file, capsys, stat_factory, provider_factory):
        path = config_file(collect_stats=True, nf_conntrack_count="1")

        assert main(["-c", path], stats_provider=provider_factory([stat_factory()])) == 0

        data = json.loads(capsys.readouterr().out)
        kinds = [m['kind'] for m in data['measurements']]
        assert kinds == ["counter", "fields"]

    def test_collect_nothing_found(self, config_file, capsys):
        path = config_file()

        assert main(["-c", path]) == 1

        data = json.loads(capsys.readouterr().out)
        assert data['measurements'] == []
        assert "conntrack" in data['error']

    def test_failed_cycle_keeps_stats_counters(self, config_file, capsys, stat_factory,
                                               provider_factory):
        path = config_file(collect_stats=True)

        assert main(["-c", path], stats_provider=provider_factory([stat_factory()])) == 1

        data = json.loads(capsys.readouterr().out)
        [counter] = data['measurements']
        assert counter['kind'] == "counter"
        assert counter['tags'] == {"cpu": "all"}
        assert counter['fields']['entries'] == 1234
        assert "error" in data

    def test_sample_config(self, capsys):
        assert main(["--sample-config"]) == 0
        assert "[conntrack]" in capsys.readouterr().out

    def test_create_config(self, tmp_path):
        path = tmp_path / "new.ini"

        assert main(["--create-config", "-c", str(path)]) == 0
        assert path.exists()

    def test_create_config_requires_path(self):
        assert main(["--create-config"]) == 1

    def test_validate_config(self, config_file):
        assert main(["--validate-config", "-c", config_file()]) == 0


class TestConntrackAgent:

    def test_collect_and_emit_appends_json_line(self, config_file, tmp_path):
        agent = ConntrackAgent(config_file(nf_conntrack_count="7"))

        agent.collect_and_emit()
        agent.collect_and_emit()

        lines = (tmp_path / "out.jsonl").read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])['measurements'][0]['fields'] == {"ip_conntrack_count": 7.0}

    def test_collect_and_emit_writes_failed_cycle(self, config_file, tmp_path, stat_factory,
                                                  provider_factory):
        agent = ConntrackAgent(config_file(collect_stats=True),
                               provider_factory([stat_factory()]))

        agent.collect_and_emit()

        [line] = (tmp_path / "out.jsonl").read_text().splitlines()
        data = json.loads(line)
        assert [m['kind'] for m in data['measurements']] == ["counter"]
        assert "error" in data

    def test_shutdown_when_not_running_is_noop(self, config_file):
        agent = ConntrackAgent(config_file(nf_conntrack_count="1"))

        agent.shutdown()

        assert agent.scheduler is None
