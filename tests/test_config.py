from budget_tracker.config import DEFAULT_CONFIG, load_config, save_config


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("BUDGET_DB_PATH", raising=False)
    cfg = load_config(tmp_path / "nope.yaml")
    assert cfg == DEFAULT_CONFIG
    assert cfg["currency"] is not DEFAULT_CONFIG["currency"]


def test_partial_file_is_merged_with_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("BUDGET_DB_PATH", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "db_path: mine.db\ncurrency:\n  supported: [USD]\n", encoding="utf-8"
    )
    cfg = load_config(path)
    assert cfg["db_path"] == "mine.db"
    assert cfg["currency"]["supported"] == ["USD"]
    assert cfg["currency"]["timeout"] == 10
    assert cfg["store"] == "sqlite"


def test_env_overrides_db_path(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGET_DB_PATH", str(tmp_path / "env.db"))
    assert load_config(None)["db_path"] == str(tmp_path / "env.db")


def test_save_round_trip(tmp_path, monkeypatch):
    monkeypatch.delenv("BUDGET_DB_PATH", raising=False)
    path = tmp_path / "nested" / "config.yaml"
    cfg = load_config(None)
    cfg["output_dir"] = "exports"
    save_config(cfg, path)
    assert load_config(path)["output_dir"] == "exports"
