from backend import app as app_module
from unittest.mock import MagicMock
import application


def test_exposes_flask_app():
    assert application.application is app_module.app


def test_main_defaults(monkeypatch):
    for name in ("HOST", "PORT", "FLASK_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    run = MagicMock()
    monkeypatch.setattr(application.application, "run", run)

    application.main()
    run.assert_called_once_with(host="127.0.0.1", port=5000, debug=False)


def test_main_reads_environment(monkeypatch):
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("FLASK_DEBUG", "True")
    run = MagicMock()
    monkeypatch.setattr(application.application, "run", run)

    application.main()
    run.assert_called_once_with(host="0.0.0.0", port=8080, debug=True)
