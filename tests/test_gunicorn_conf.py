import importlib

import gunicorn_conf


def test_defaults(monkeypatch):
    for name in ("HOST", "PORT", "WEB_CONCURRENCY", "WORKER_TIMEOUT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    conf = importlib.reload(gunicorn_conf)
    assert conf.bind == "0.0.0.0:8000"
    assert conf.workers >= 3
    assert conf.worker_class == "uvicorn.workers.UvicornWorker"
    assert conf.timeout == 30
    assert conf.loglevel == "info"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("WEB_CONCURRENCY", "2")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    conf = importlib.reload(gunicorn_conf)
    assert conf.bind == "0.0.0.0:9000"
    assert conf.workers == 2
    assert conf.loglevel == "warning"
