"""CLI integration tests."""

from unittest.mock import patch

import respx
from conftest import MD5_ECOLI, seed_annotation_data, shock_handler
from typer.testing import CliRunner

from mgstream.cli.main import app
from mgstream.config import config

runner = CliRunner()


def _make_test_session():
    """Create a test SessionLocal that uses SQLite, seeded with two samples."""
    from sqlalchemy import create_engine, event
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from mgstream.db.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    TestSession = sessionmaker(bind=engine)
    db = TestSession()
    seed_annotation_data(db)
    db.close()
    return TestSession


def _mock_shock():
    respx.get(url__startswith=config.shock.url).mock(side_effect=shock_handler)


@respx.mock
@patch("mgstream.cli.annotation._SessionLocal")
def test_stream_similarity(mock_session_local):
    mock_session_local.side_effect = _make_test_session()
    _mock_shock()

    result = runner.invoke(
        app, ["annotation", "stream", "similarity", "mgm4447943.3", "--source", "SwissProt"],
    )
    assert result.exit_code == 0
    assert "query sequence id" in result.output
    assert "mgm4447943.3|read_1|SwissProt" in result.output
    assert "Download complete. 3 rows retrieved" in result.output


@respx.mock
@patch("mgstream.cli.annotation._SessionLocal")
def test_stream_sequence_with_md5s(mock_session_local):
    mock_session_local.side_effect = _make_test_session()
    _mock_shock()

    result = runner.invoke(app, [
        "annotation", "stream", "sequence", "4447943.3",
        "--type", "function", "--source", "KO", "--md5", MD5_ECOLI,
    ])
    assert result.exit_code == 0
    assert "function=[ATP-dependent Lon protease]" in result.output
    assert "Download complete. 2 rows retrieved" in result.output


@patch("mgstream.cli.annotation._SessionLocal")
def test_stream_private_sample_denied(mock_session_local):
    mock_session_local.side_effect = _make_test_session()

    result = runner.invoke(app, ["annotation", "stream", "similarity", "mgm4440000.3"])
    assert result.exit_code == 1
    assert "401" in result.output


@patch("mgstream.cli.annotation._SessionLocal")
def test_stream_invalid_source(mock_session_local):
    mock_session_local.side_effect = _make_test_session()

    result = runner.invoke(
        app, ["annotation", "stream", "similarity", "mgm4447943.3", "--source", "UniRef"],
    )
    assert result.exit_code == 1
    assert "Invalid source" in result.output


def test_sources():
    result = runner.invoke(app, ["annotation", "sources"])
    assert result.exit_code == 0
    assert "SwissProt" in result.output
    assert "Subsystems" in result.output
    assert "genus" in result.output


@patch("mgstream.cli.samples._SessionLocal")
def test_samples_add_and_list(mock_session_local):
    mock_session_local.side_effect = _make_test_session()

    result = runner.invoke(app, ["samples", "add", "mgm4450000.3", "--public", "--name", "lake"])
    assert result.exit_code == 0
    assert "Registered mgm4450000.3" in result.output

    result = runner.invoke(app, ["samples", "list"])
    assert result.exit_code == 0
    assert "mgm4450000.3" in result.output
    assert "mgm4447943.3" in result.output


@patch("mgstream.cli.samples._SessionLocal")
def test_samples_add_bad_id(mock_session_local):
    mock_session_local.side_effect = _make_test_session()

    result = runner.invoke(app, ["samples", "add", "lake"])
    assert result.exit_code == 1
    assert "invalid id format" in result.output


@patch("mgstream.cli.main.get_engine")
def test_init_creates_tables(mock_get_engine):
    from sqlalchemy import create_engine, inspect
    from sqlalchemy.pool import StaticPool

    engine = create_engine("sqlite://", poolclass=StaticPool)
    mock_get_engine.return_value = engine

    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert "Tables ready" in result.output
    assert "samples" in inspect(engine).get_table_names()
