import pytest

from ghbot import config


@pytest.mark.parametrize("value, expected", [
    ("30s", 30),
    ("5ms", 0.005),
    ("1m", 60),
    ("3h", 10800),
    ("1h30m", 5400),
    ("1.5s", 1.5),
])
def test_parse_duration(value, expected):
    assert config.parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "30", "s", "10 s", "1x", "m5"])
def test_parse_duration_failure(value):
    with pytest.raises(ValueError):
        config.parse_duration(value)


def test_defaults(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("GH_SECRET", raising=False)
    settings = config.load_config(["--token", "abc"])
    assert settings.token == "abc"
    assert settings.interval == 30
    assert not settings.webhook
    assert settings.port == 8080
    assert settings.secret is None
    assert not settings.debug


def test_environment(monkeypatch):
    monkeypatch.setenv("GH_AUTH", "from-env")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("GH_SECRET", "s3cr3t")
    settings = config.load_config(["--webhook", "-d", "--interval", "1m"])
    assert settings.token == "from-env"
    assert settings.port == 9000
    assert settings.secret == "s3cr3t"
    assert settings.webhook
    assert settings.debug
    assert settings.interval == 60


def test_missing_token(monkeypatch, capsys):
    monkeypatch.delenv("GH_AUTH", raising=False)
    with pytest.raises(SystemExit) as exc_info:
        config.load_config([])
    assert exc_info.value.code == 1
    assert "GitHub token cannot be empty." in capsys.readouterr().err


@pytest.mark.parametrize("interval", ["soon", "0s"])
def test_bad_interval(interval):
    with pytest.raises(SystemExit) as exc_info:
        config.load_config(["--token", "abc", "--interval", interval])
    assert exc_info.value.code == 1


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        config.load_config(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == "v0.1.0"


@pytest.mark.parametrize("env, argv", [
    ("eighty", []),
    (None, ["--port", "eighty"]),
])
def test_bad_port(monkeypatch, capsys, env, argv):
    if env is None:
        monkeypatch.delenv("PORT", raising=False)
    else:
        monkeypatch.setenv("PORT", env)
    with pytest.raises(SystemExit) as exc_info:
        config.load_config(["--token", "abc"] + argv)
    assert exc_info.value.code == 1
    assert "invalid port 'eighty'" in capsys.readouterr().err
