import pytest

from gitops_operator.config import OperatorConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "METRICS_PORT",
        "REQUEST_TIMEOUT",
        "MAX_WORKERS",
        "JOB_WATCH_TIMEOUT_SECONDS",
        "LOG_LEVEL",
        "EVENT_SOURCE_COMPONENT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert load_config() == OperatorConfig()
    assert OperatorConfig().event_source_component == "gitops-operator"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("METRICS_PORT", "9090")
    monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("MAX_WORKERS", "8")
    monkeypatch.setenv("JOB_WATCH_TIMEOUT_SECONDS", "120")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("EVENT_SOURCE_COMPONENT", "eunomia-operator")

    cfg = load_config()

    assert cfg.metrics_port == 9090
    assert cfg.request_timeout == 12.5
    assert cfg.max_workers == 8
    assert cfg.watch_timeout_seconds == 120
    assert cfg.log_level == "DEBUG"
    assert cfg.event_source_component == "eunomia-operator"


@pytest.mark.parametrize(
    "name,value,attr",
    [
        ("METRICS_PORT", "not-a-port", "metrics_port"),
        ("REQUEST_TIMEOUT", "soon", "request_timeout"),
        ("REQUEST_TIMEOUT", "-1", "request_timeout"),
        ("JOB_WATCH_TIMEOUT_SECONDS", "", "watch_timeout_seconds"),
    ],
)
def test_invalid_values_fall_back_to_defaults(monkeypatch, name, value, attr):
    monkeypatch.setenv(name, value)
    assert getattr(load_config(), attr) == getattr(OperatorConfig(), attr)


def test_lower_bounds(monkeypatch):
    monkeypatch.setenv("MAX_WORKERS", "0")
    monkeypatch.setenv("JOB_WATCH_TIMEOUT_SECONDS", "0")

    cfg = load_config()

    assert cfg.max_workers == 1
    assert cfg.watch_timeout_seconds == 1
