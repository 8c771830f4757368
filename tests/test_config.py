import pytest

from cfo_bot.config import load_app_config


def write_config(tmp_path, content: str, name: str = "cfo_bot_config.toml"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_defaults_when_no_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_app_config()

    assert config.database.engine == "sqlite"
    assert config.database.path == (tmp_path / "data/db/cfo_bot.sqlite").resolve()
    assert config.forecast_defaults.months_to_forecast == 12
    assert config.forecast_defaults.revenue_growth_pct == 0.0
    assert config.history_window == 100
    assert config.advisor.model == "gpt-4o-mini"
    assert config.advisor.api_key_env == "OPENAI_API_KEY"
    assert config.advisor.history_messages == 10
    assert config.display_mode == "table"
    assert config.currency == "USD"
    assert config.log_level == "WARNING"


def test_default_file_in_current_directory_is_used(tmp_path, monkeypatch):
    write_config(tmp_path, '[display]\ncurrency = "EUR"\n')
    monkeypatch.chdir(tmp_path)

    assert load_app_config().currency == "EUR"


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_full_config_and_relative_paths(tmp_path):
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    path = write_config(
        config_dir,
        """
[database]
engine = "sqlite"
path = "../store/app.sqlite"

[forecast]
months = 24
revenue_growth_pct = 2.5
expense_change_pct = -1

[categorization]
history_window = 50

[advisor]
model = "gpt-4.1-mini"
api_key_env = "CFO_BOT_KEY"
history_messages = 4

[display]
mode = "Both"
currency = "CAD"

[logging]
level = "debug"
""",
    )

    config = load_app_config(str(path))

    assert config.database.path == (tmp_path / "store" / "app.sqlite").resolve()
    assert config.forecast_defaults.months_to_forecast == 24
    assert config.forecast_defaults.revenue_growth_pct == 2.5
    assert config.forecast_defaults.expense_change_pct == -1.0
    assert config.history_window == 50
    assert config.advisor.model == "gpt-4.1-mini"
    assert config.advisor.api_key_env == "CFO_BOT_KEY"
    assert config.advisor.history_messages == 4
    assert config.display_mode == "both"
    assert config.currency == "CAD"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "content",
    [
        '[display]\nmode = "html"\n',
        "[forecast]\nmonths = 0\n",
        '[forecast]\nmonths = "twelve"\n',
        "[forecast]\nrevenue_growth_pct = true\n",
        "[categorization]\nhistory_window = -1\n",
        '[logging]\nlevel = "LOUD"\n',
        'database = "sqlite"\n',
    ],
)
def test_invalid_values_raise_value_error(tmp_path, content):
    path = write_config(tmp_path, content)
    with pytest.raises(ValueError):
        load_app_config(str(path))


def test_unparseable_toml_raises_value_error(tmp_path):
    path = write_config(tmp_path, "[database\npath = ")
    with pytest.raises(ValueError, match="Failed to parse"):
        load_app_config(str(path))
