import pytest

from http_to_hdfs.config import ActionConfig
from http_to_hdfs.settings import Settings

SETTINGS = """
action:
  url: http://host/feeds/${feed}
  hdfsFilePath: /tmp/feeds/${feed}.txt
  numRetries: 1
  requestHeaders: |
    Accept:text/plain
    X-Client:pipeline
arguments:
  feed: users
logging:
  level: DEBUG
"""


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(SETTINGS)
    return path


def test_loads_sections(settings_file, clean_env):
    settings = Settings(settings_file)

    assert settings.action["numRetries"] == 1
    assert settings.arguments == {"feed": "users"}
    assert settings.logging["level"] == "DEBUG"
    assert settings.get("action", "url") == "http://host/feeds/${feed}"
    assert settings.get("action", "missing", default="x") == "x"


def test_environment_overrides(settings_file, clean_env):
    clean_env.setenv("HTTP_TO_HDFS_NUM_RETRIES", "5")
    clean_env.setenv("HTTP_TO_HDFS_DISABLE_SSL_VALIDATION", "false")
    clean_env.setenv("HTTP_TO_HDFS_METHOD", "POST")
    clean_env.setenv("LOG_LEVEL", "WARNING")

    settings = Settings(settings_file)

    assert settings.action["numRetries"] == 5
    assert settings.action["disableSSLValidation"] is False
    assert settings.action["method"] == "POST"
    assert settings.logging["level"] == "WARNING"


def test_environment_creates_missing_sections(tmp_path, clean_env):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    clean_env.setenv("HTTP_TO_HDFS_URL", "http://host/x")

    assert Settings(path).action == {"url": "http://host/x"}


def test_settings_feed_the_action_config(settings_file, clean_env):
    settings = Settings(settings_file)
    config = ActionConfig(settings.action).with_arguments(settings.arguments)

    spec = config.to_request_spec()
    assert spec.url == "http://host/feeds/users"
    assert spec.headers == {"Accept": "text/plain", "X-Client": "pipeline"}
    assert config.to_output_target().destination_path == "/tmp/feeds/users.txt"


def test_missing_file(tmp_path, clean_env):
    with pytest.raises(FileNotFoundError):
        Settings(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path, clean_env):
    path = tmp_path / "bad.yaml"
    path.write_text("action: [unclosed\n")
    with pytest.raises(ValueError):
        Settings(path)


def test_environment_values_are_only_bool_or_int(settings_file, clean_env):
    clean_env.setenv("HTTP_TO_HDFS_CONNECT_TIMEOUT", "1500")
    clean_env.setenv("HTTP_TO_HDFS_READ_TIMEOUT", "1.5")

    settings = Settings(settings_file)

    assert settings.action["connectTimeout"] == 1500
    assert settings.action["readTimeout"] == "1.5"
    assert [failure.field for failure in ActionConfig(settings.action).validate()] == ["readTimeout"]
