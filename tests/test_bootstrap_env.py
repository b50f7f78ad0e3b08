import json
import os

from sentiment_table import bootstrap_env


def test_credentials_json_is_written_to_temp_file(monkeypatch, tmp_path):
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    monkeypatch.setenv("GOOGLE_CREDENTIALS_JSON", json.dumps({"type": "service_account"}))
    monkeypatch.setattr(bootstrap_env.tempfile, "gettempdir", lambda: str(tmp_path))

    path = bootstrap_env.write_google_credentials()

    assert path == str(tmp_path / bootstrap_env.CREDENTIALS_FILENAME)
    assert os.environ["GOOGLE_APPLICATION_CREDENTIALS"] == path
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == {"type": "service_account"}


def test_existing_credentials_file_is_kept(monkeypatch, tmp_path):
    creds = tmp_path / "creds.json"
    creds.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(creds))
    monkeypatch.setenv("GOOGLE_CREDENTIALS_JSON", json.dumps({"type": "other"}))

    assert bootstrap_env.write_google_credentials() == str(creds)


def test_invalid_credentials_json_is_ignored(monkeypatch, tmp_path):
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    monkeypatch.setenv("GOOGLE_CREDENTIALS_JSON", "not json")
    monkeypatch.setattr(bootstrap_env.tempfile, "gettempdir", lambda: str(tmp_path))

    assert bootstrap_env.write_google_credentials() is None
    assert not (tmp_path / bootstrap_env.CREDENTIALS_FILENAME).exists()
