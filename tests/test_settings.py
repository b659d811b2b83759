from __future__ import annotations

from pathlib import Path

from proctor_app.utils.settings import ProctorSettings


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("PROCTOR_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("PROCTOR_DATA_FILE", raising=False)
    settings = ProctorSettings(_env_file=None)
    assert settings.PORT == 8000
    assert settings.CLASSIFICATION_DURATION_S == 600
    assert settings.WEBHOOK_URL == ""
    assert settings.data_path is None


def test_environment_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PROCTOR_PORT", "9001")
    monkeypatch.setenv("PROCTOR_WEBHOOK_URL", "https://hooks.example.com/done")
    monkeypatch.setenv("PROCTOR_DATA_FILE", str(tmp_path / "store.json"))

    settings = ProctorSettings(_env_file=None)

    assert settings.PORT == 9001
    assert settings.WEBHOOK_URL == "https://hooks.example.com/done"
    assert settings.data_path == tmp_path / "store.json"
