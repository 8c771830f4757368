import pytest

from cfo_bot import __version__
from cfo_bot.cli import main
from cfo_bot.db import DatabaseConfig, append_message, create_conversation


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "cfo_bot_config.toml"
    path.write_text(
        '[database]\npath = "data/test.sqlite"\n\n[forecast]\nmonths = 6\n',
        encoding="utf-8",
    )
    return str(path)


def run(config_path, *args):
    main(["--config", config_path, *args])


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == f"cfo_bot version {__version__}"


def test_business_snapshot_and_forecast_flow(config_path, capsys):
    run(config_path, "business", "add", "Acme Studio", "--industry", "agency")
    assert "Created business #1: Acme Studio" in capsys.readouterr().out

    run(
        config_path,
        "snapshot", "add",
        "--business", "1",
        "--period", "2026-01",
        "--cash", "1000",
        "--expenses", "400",
    )
    assert "Recorded snapshot #1 for Jan 2026." in capsys.readouterr().out

    run(config_path, "snapshot", "show", "--business", "1")
    out = capsys.readouterr().out
    assert "=== Snapshot Jan 2026 ===" in out
    assert "2 months" in out

    run(config_path, "forecast", "--business", "1", "--months", "4")
    out = capsys.readouterr().out
    assert "=== Cash forecast ===" in out
    assert "Cash runs out in" in out
    assert "(month 3 of 4)" in out


def test_statement_import_with_override(config_path, tmp_path, capsys):
    run(config_path, "business", "add", "Acme")
    statement = tmp_path / "pl.csv"
    statement.write_text("name,amount\nRevenue,1000\nFigma,-45\n", encoding="utf-8")

    run(
        config_path,
        "statement", "import",
        "--business", "1",
        str(statement),
        "--period", "2026-01",
        "--set", "figma=Software",
    )
    assert "2 lines, 0 with reused categories" in capsys.readouterr().out

    run(config_path, "statement", "review", "--business", "1", str(statement))
    out = capsys.readouterr().out
    assert "Software" in out
    assert "2 categories reused from your previous uploads." in out


def test_csv_export(config_path, tmp_path, capsys):
    run(config_path, "business", "add", "Acme")
    capsys.readouterr()

    run(
        config_path,
        "--display-mode", "csv",
        "--output-dir", str(tmp_path / "out"),
        "business", "list",
    )

    out = capsys.readouterr().out
    assert "Wrote" in out
    assert len(list((tmp_path / "out").glob("businesses_*.csv"))) == 1


def test_decision_commands(config_path, capsys):
    run(config_path, "business", "add", "Acme")
    run(
        config_path,
        "decision", "add",
        "--business", "1",
        "--title", "Hire designer",
        "--question", "Can we afford it?",
    )
    run(config_path, "decision", "status", "--business", "1", "1", "deferred")

    out = capsys.readouterr().out
    assert "Created decision #1: Hire designer" in out
    assert "Decision #1 is now 'deferred'." in out


def test_unknown_business_exits_with_message(config_path):
    with pytest.raises(SystemExit, match="Business #7 not found"):
        run(config_path, "snapshot", "list", "--business", "7")


def test_invalid_period_exits(config_path):
    run(config_path, "business", "add", "Acme")
    with pytest.raises(SystemExit, match="Invalid month"):
        run(
            config_path,
            "snapshot", "add",
            "--business", "1",
            "--period", "January",
            "--cash", "10",
        )


def test_advisor_commands_need_api_key(config_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    run(config_path, "business", "add", "Acme")

    with pytest.raises(SystemExit, match="OPENAI_API_KEY"):
        run(config_path, "ask", "--business", "1", "How am I doing?")


def test_missing_config_file_exits(tmp_path):
    with pytest.raises(SystemExit, match="Configuration error"):
        main(["--config", str(tmp_path / "nope.toml"), "business", "list"])


def test_business_update_and_delete(config_path, capsys):
    run(config_path, "business", "add", "Acme")
    run(config_path, "business", "update", "1", "--name", "Acme Labs", "--industry", "saas")
    assert "Updated business #1: Acme Labs" in capsys.readouterr().out

    run(config_path, "business", "delete", "1")
    assert "Re-run with --yes" in capsys.readouterr().out

    run(config_path, "business", "list")
    assert "Acme Labs" in capsys.readouterr().out

    run(config_path, "business", "delete", "1", "--yes")
    assert "Deleted business #1: Acme Labs" in capsys.readouterr().out

    run(config_path, "business", "list")
    assert "No businesses yet." in capsys.readouterr().out

    with pytest.raises(SystemExit, match="Business #1 not found"):
        run(config_path, "business", "delete", "1", "--yes")


def test_statement_list(config_path, tmp_path, capsys):
    run(config_path, "business", "add", "Acme")
    statement = tmp_path / "pl_jan.csv"
    statement.write_text("name,amount\nRevenue,1000\n", encoding="utf-8")
    run(
        config_path,
        "statement", "import",
        "--business", "1",
        str(statement),
        "--period", "2026-01",
    )
    capsys.readouterr()

    run(config_path, "statement", "list", "--business", "1")

    out = capsys.readouterr().out
    assert "=== Statements ===" in out
    assert "pl_jan.csv" in out
    assert "Jan 2026" in out


def test_statement_import_with_overflowing_amount(config_path, tmp_path, capsys):
    run(config_path, "business", "add", "Acme")
    statement = tmp_path / "pl.csv"
    statement.write_text("name,amount\nOffice Rent,1e400\n", encoding="utf-8")

    with pytest.raises(SystemExit, match="Error: Non-finite amounts"):
        run(
            config_path,
            "statement", "import",
            "--business", "1",
            str(statement),
            "--period", "2026-01",
        )

    capsys.readouterr()
    run(config_path, "statement", "list", "--business", "1")
    assert "(no rows)" in capsys.readouterr().out


def test_conversation_commands(config_path, tmp_path, capsys):
    run(config_path, "business", "add", "Acme")
    cfg = DatabaseConfig(engine="sqlite", path=tmp_path / "data" / "test.sqlite")
    conversation = create_conversation(cfg, 1, "How long is my runway?")
    append_message(cfg, 1, conversation.id, "user", "How long is my runway?")
    append_message(cfg, 1, conversation.id, "assistant", "About 16 months.")
    capsys.readouterr()

    run(config_path, "conversation", "list", "--business", "1")
    out = capsys.readouterr().out
    assert "=== Conversations ===" in out
    assert "How long is my runway?" in out

    run(config_path, "conversation", "show", "--business", "1", str(conversation.id))
    out = capsys.readouterr().out
    assert f"=== Conversation #{conversation.id}: How long is my runway? ===" in out
    assert "CFO Bot:\nAbout 16 months." in out

    run(config_path, "conversation", "delete", "--business", "1", str(conversation.id))
    assert f"Deleted conversation #{conversation.id}." in capsys.readouterr().out

    run(config_path, "conversation", "list", "--business", "1")
    assert "No conversations yet." in capsys.readouterr().out

    with pytest.raises(SystemExit, match="Conversation #1 not found"):
        run(config_path, "conversation", "show", "--business", "1", "1")
