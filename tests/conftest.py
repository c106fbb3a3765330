import pytest
from fastapi.testclient import TestClient

from urlconfig.config import UrlConfig
from urlconfig.main import create_app

CONFIG_ENV_KEYS = (
    "URLCONFIG_BASE_URL",
    "URLCONFIG_REPOSITORY_URL",
    "HOST",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture
def url_config() -> UrlConfig:
    return UrlConfig(base_url="https://github.com", repository_url="reponame")


@pytest.fixture
def client(url_config):
    with TestClient(create_app(url_config)) as c:
        yield c


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Process environment without any of the service's configuration keys, run from an
    empty directory so no .env file is picked up. Keys are registered with monkeypatch
    first so values written by load_dotenv are removed again after the test.
    """
    monkeypatch.chdir(tmp_path)
    for key in CONFIG_ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch
