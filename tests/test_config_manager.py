from form_layout_toolkit.config import ConfigManager


def test_singleton_until_reset():
    first = ConfigManager()
    assert ConfigManager() is first
    ConfigManager.reset()
    assert ConfigManager() is not first


def test_packaged_defaults_are_loaded():
    cfg = ConfigManager()
    assert cfg.get_node_defaults()["width"] == 12
    assert cfg.get_node_defaults()["name_template"] == "New {variant}"
    assert cfg.get_id_settings()["prefix_length"] == 5
    assert cfg.get_import_settings()["spreadsheet"]["columns"]["name"] == "Field Design Name"
    assert cfg.get_logging_config()["version"] == 1


def test_user_overrides_are_deep_merged(tmp_path):
    user_dir = tmp_path / "user_config"
    user_dir.mkdir()
    (user_dir / "editor.yml").write_text(
        "node_defaults:\n  offset: 1\nids:\n  prefix_length: 8\n",
        encoding="utf-8",
    )

    cfg = ConfigManager()

    assert cfg.get_node_defaults()["offset"] == 1
    assert cfg.get_node_defaults()["width"] == 12
    assert cfg.get_id_settings() == {"prefix_length": 8}


def test_broken_user_file_falls_back_to_packaged(tmp_path, caplog):
    user_dir = tmp_path / "user_config"
    user_dir.mkdir()
    (user_dir / "editor.yml").write_text("node_defaults: [unclosed\n", encoding="utf-8")

    cfg = ConfigManager()

    assert cfg.get_node_defaults()["width"] == 12
    assert any("Could not parse user config" in r.getMessage() for r in caplog.records)


def test_empty_user_file_is_ignored(tmp_path):
    user_dir = tmp_path / "user_config"
    user_dir.mkdir()
    (user_dir / "editor.yml").write_text("", encoding="utf-8")
    assert ConfigManager().get_id_settings()["prefix_length"] == 5
