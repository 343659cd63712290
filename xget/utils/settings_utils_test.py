from xget.settings import Settings


def test_secret_file_overrides_environment(tmp_path, monkeypatch):
    secret = tmp_path / "sentry_dsn"
    secret.write_text("https://key@sentry.example.com/1\n")
    monkeypatch.setenv("SENTRY_DSN", "https://env@sentry.example.com/2")
    monkeypatch.setenv("SENTRY_DSN_FILE", str(secret))

    assert Settings().SENTRY_DSN == "https://key@sentry.example.com/1"


def test_missing_secret_file_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("USER_AGENT", "custom-agent")
    monkeypatch.setenv("USER_AGENT_FILE", str(tmp_path / "missing"))

    assert Settings().USER_AGENT == "custom-agent"


def test_environment_values_are_typed(monkeypatch):
    monkeypatch.setenv("TRANSPARENT_TOKEN_AUTH", "false")
    monkeypatch.setenv("UPSTREAM_READ_TIMEOUT", "60")

    current = Settings()

    assert current.TRANSPARENT_TOKEN_AUTH is False
    assert current.UPSTREAM_READ_TIMEOUT == 60.0
