"""Bootstrap: fail fast on bad configuration, serve on good configuration."""
import pytest

from urlconfig import main as main_module


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    return calls


def test_valid_config_starts_listener(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "https://github.com")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "reponame")
    clean_env.setenv("PORT", "9000")

    assert main_module.main([]) == 0

    [(app, kwargs)] = uvicorn_calls
    assert app.state.url_config.base_url == "https://github.com"
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9000


def test_cli_flags_override_environment(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "https://github.com")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "reponame")

    assert main_module.main(["--host", "0.0.0.0", "--port", "8123"]) == 0
    [(_, kwargs)] = uvicorn_calls
    assert (kwargs["host"], kwargs["port"]) == ("0.0.0.0", 8123)


def test_short_repository_url_never_binds(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "https://github.com")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "ab")

    assert main_module.main([]) == 1
    assert uvicorn_calls == []


def test_malformed_base_url_never_binds(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "not-a-url")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "reponame")

    assert main_module.main([]) == 1
    assert uvicorn_calls == []


def test_missing_config_never_binds(clean_env, uvicorn_calls):
    assert main_module.main([]) == 1
    assert uvicorn_calls == []


def test_port_zero_flag_is_passed_through(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "https://github.com")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "reponame")
    clean_env.setenv("PORT", "9000")

    assert main_module.main(["--port", "0"]) == 0
    [(_, kwargs)] = uvicorn_calls
    assert kwargs["port"] == 0


def test_invalid_log_level_never_binds(clean_env, uvicorn_calls):
    clean_env.setenv("URLCONFIG_BASE_URL", "https://github.com")
    clean_env.setenv("URLCONFIG_REPOSITORY_URL", "reponame")
    clean_env.setenv("LOG_LEVEL", "LOUD")

    assert main_module.main([]) == 1
    assert uvicorn_calls == []


def test_dotenv_in_working_directory_configures_service(clean_env, tmp_path, uvicorn_calls):
    (tmp_path / ".env").write_text("URLCONFIG_BASE_URL=https://github.com\nURLCONFIG_REPOSITORY_URL=reponame\n")

    assert main_module.main([]) == 0
    [(app, _)] = uvicorn_calls
    assert app.state.url_config.repository_url == "reponame"
