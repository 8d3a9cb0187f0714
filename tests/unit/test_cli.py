"""
Command line driver tests: argument handling and config propagation.
"""
import argparse
from unittest.mock import patch

import pytest

import main as cli
from core.config_loader import AppConfig, WebConfig
from web.backend.config import get_config, set_config


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "scout.yaml"
    path.write_text(
        "web:\n"
        "  port: 9123\n"
        "  analyze_rate_limit: 2/minute\n"
        "discovery:\n"
        "  max_limit: 120\n"
    )
    return str(path)


@pytest.fixture(autouse=True)
def reset_web_config():
    yield
    set_config(None)


def discover_args(**fields):
    defaults = dict(platforms="both", search_type="hashtag", query="ootd", limit=None, street_casting=False)
    defaults.update(fields)
    return argparse.Namespace(**defaults)


class TestBuildRequest:

    def test_default_limit(self):
        request = cli.build_request(AppConfig(), discover_args())
        assert request.limit == 50
        assert [p.value for p in request.platforms] == ["instagram", "tiktok"]

    def test_limit_is_capped(self):
        assert cli.build_request(AppConfig(), discover_args(limit=5000)).limit == 200

    def test_cap_comes_from_config(self, config_file):
        config = cli.load_config(config_file)
        assert cli.build_request(config, discover_args(limit=500)).limit == 120


class TestDiscoverCommand:

    def test_unusable_query_exits_with_usage_error(self, config_file, capsys):
        argv = ["--config", config_file, "discover", "--user-id", "scout-1",
                "--search-type", "location", "--query", "!!!"]

        with patch.object(cli, "run_discovery") as run_discovery:
            with pytest.raises(SystemExit) as exc:
                cli.main(argv)

        assert exc.value.code == 2
        assert "invalid discovery request" in capsys.readouterr().err
        run_discovery.assert_not_called()


class TestServeCommand:

    def test_serve_uses_config_argument(self, config_file):
        with patch("web.backend.app.main") as serve:
            cli.main(["--config", config_file, "serve"])

        config = serve.call_args.args[0]
        assert config.web.port == 9123
        assert config.discovery.max_limit == 120

    def test_server_runs_with_given_config(self):
        from web.backend.app import main as serve

        config = AppConfig(web=WebConfig(port=9200, analyze_rate_limit="3/minute"))
        with patch("uvicorn.run") as run:
            serve(config)

        assert run.call_args.kwargs["port"] == 9200
        assert get_config() is config
        assert get_config().web.analyze_rate_limit == "3/minute"

    def test_create_app_registers_config(self):
        from web.backend.app import create_app

        config = AppConfig(web=WebConfig(discovery_rate_limit="1/minute"))
        create_app(config=config)

        assert get_config().web.discovery_rate_limit == "1/minute"
