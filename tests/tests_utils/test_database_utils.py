"""
========================================================
Pytest suite for utils/database_utils.py
========================================================

Sections:
---------
1. Unit tests - type mapping, engine creation
2. Integration tests - Select executed through SQLAlchemy on in-memory SQLite
3. Edge case tests - rejected statements, unreachable databases

Test Coverage:
--------------
- sqlalchemy_type: ParamType to SQLAlchemy type mapping
- SQLAlchemyStatement: bind, execute, fetch, row count, cursor release
- SQLAlchemyConnection: prepare, last insert id, autocommit
- engine_connection_provider / default_connection_provider
- check_database_available

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_database_utils.py -v
By category:        pytest tests/tests_utils/test_database_utils.py -m integration
"""

import pytest
from sqlalchemy import String, create_engine, text
from sqlalchemy.types import Boolean, Integer, LargeBinary

from fluent_sql import ExecutionStatus, FetchMode, ParamType, Select
from utils import database_utils
from utils.database_utils import (
    DatabaseConnectionError,
    SQLAlchemyConnection,
    check_database_available,
    create_sqlalchemy_engine,
    default_connection_provider,
    engine_connection_provider,
    get_default_engine,
    sqlalchemy_type,
)

# ====================
# Fixtures
# ====================

USERS = [
    (1, "Ann", "active", "true", 31),
    (2, "Bob", "active", "false", 45),
    (3, "Cid", "banned", "true", 28),
    (4, "Dee", "active", "true", 52),
]


@pytest.fixture
def engine():
    """In-memory SQLite engine seeded with a users table."""
    engine = create_sqlalchemy_engine("sqlite://", echo=False)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE users ("
            "id INTEGER PRIMARY KEY, name TEXT, status TEXT, active TEXT, age INTEGER)"
        ))
        for row in USERS:
            conn.execute(
                text("INSERT INTO users VALUES (:id, :name, :status, :active, :age)"),
                dict(zip(("id", "name", "status", "active", "age"), row))
            )
    yield engine
    engine.dispose()


@pytest.fixture
def connection(engine):
    """Adapted connection over the seeded engine."""
    with SQLAlchemyConnection(engine.connect()) as conn:
        yield conn


def _names(select):
    return [row["name"] for row in select.fetch_all_rows()]


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
@pytest.mark.parametrize("param_type, value, expected", [
    (ParamType.STRING, "a", String),
    (ParamType.INT, 1, Integer),
    (ParamType.BOOL, True, Boolean),
    (ParamType.BOOL, "true", String),
    (ParamType.LOB, b"x", LargeBinary),
])
def test_sqlalchemy_type_mapping(param_type, value, expected):
    assert isinstance(sqlalchemy_type(param_type, value), expected)


@pytest.mark.unit
def test_create_engine_uses_given_url():
    engine = create_sqlalchemy_engine("sqlite://")

    assert engine.url.drivername == "sqlite"
    engine.dispose()


@pytest.mark.unit
def test_default_engine_is_shared(monkeypatch):
    monkeypatch.setattr(database_utils, "_default_engine", None)
    monkeypatch.setattr(database_utils.config.db, "url", "sqlite://")

    first = get_default_engine()

    assert get_default_engine() is first
    with default_connection_provider() as conn:
        assert isinstance(conn, SQLAlchemyConnection)
    first.dispose()


@pytest.mark.unit
def test_check_database_available(engine):
    assert check_database_available(engine) is True


# ======================
# 2. INTEGRATION TESTS
# ======================

@pytest.mark.integration
def test_select_with_filters(connection):
    select = Select("users", connection=connection).eq("status", "active").order("name")

    assert select.execute()
    assert _names(select) == ["Ann", "Bob", "Dee"]


@pytest.mark.integration
def test_boolean_literal_matches_text_column(connection):
    select = Select("users", connection=connection).eq("active", True).order("id")

    assert select.execute()
    assert _names(select) == ["Ann", "Cid", "Dee"]


@pytest.mark.integration
def test_or_group_with_like(connection):
    select = (
        Select("users", connection=connection)
        .eq("status", "active")
        .start_or()
        .like("name", "an")
        .eq("age", 52, ParamType.INT)
        .end_or()
        .order("id")
    )

    assert select.execute()
    assert _names(select) == ["Ann", "Dee"]


@pytest.mark.integration
def test_in_list_and_sub_select(connection):
    banned = Select("SELECT id FROM `users`", connection=connection).eq("status", "banned")
    select = (
        Select("users", connection=connection)
        .in_("id", [1, 2, 3], ParamType.INT)
        .not_in("id", banned)
        .order("id")
    )

    assert select.execute()
    assert _names(select) == ["Ann", "Bob"]


@pytest.mark.integration
def test_eq_die_matches_nothing(connection):
    select = Select("users", connection=connection).eq_die("status", "")

    assert select.execute()
    assert select.fetch_all_rows() == []


@pytest.mark.integration
def test_limit_offset_and_tuples(connection):
    select = Select("SELECT id, name FROM `users`", connection=connection).order("id").page(2, 2)

    assert select.execute()
    assert select.fetch_all_rows(FetchMode.TUPLE) == [(3, "Cid"), (4, "Dee")]


@pytest.mark.integration
def test_get_rows_iterates_lazily(connection):
    select = Select("users", connection=connection).order("id")
    select.execute()

    rows = select.get_rows(FetchMode.TUPLE)

    assert next(rows)[1] == "Ann"
    rows.close()


@pytest.mark.integration
def test_update_with_set(connection):
    update = (
        Select("users", "UPDATE", connection=connection)
        .set("status", "banned")
        .set("age", 46, ParamType.INT)
        .eq("name", "Bob")
    )

    assert update.execute()
    assert update.get_row_count() == 1

    count = Select("SELECT COUNT(*) FROM `users`", connection=connection).eq("status", "banned")
    count.execute()
    assert count.get_single_item() == 2


@pytest.mark.integration
def test_delete_reports_row_count(connection):
    delete = Select("users", "DELETE", connection=connection).eq("active", False)

    assert delete.execute()
    assert delete.get_row_count() == 1


@pytest.mark.integration
def test_insert_exposes_last_insert_id(connection):
    insert = Select(
        "INSERT INTO users (name, status, active, age) VALUES ('Eve', 'active', 'true', 22)",
        connection=connection,
    )

    assert insert.execute()
    assert insert.get_insert_id() == 5


@pytest.mark.integration
def test_provider_wiring(engine):
    select = Select("users", connection_provider=engine_connection_provider(engine)).eq("name", "Cid")

    assert select.execute()
    assert select.get_single_item() == 3
    select.connection.close()


# ==================
# 3. EDGE CASE TESTS
# ==================

@pytest.mark.edge_case
def test_bad_statement_is_reported(connection):
    select = Select("missing_table", connection=connection).eq("a", "1")

    result = select.execute()

    assert result.status is ExecutionStatus.FAILED
    assert "no such table" in result.reason
    assert select.fetch_all_rows() == []
    assert select.get_row_count() == 0


@pytest.mark.edge_case
def test_connection_usable_after_failure(connection):
    Select("missing_table", connection=connection).execute()

    select = Select("users", connection=connection).eq("name", "Ann")

    assert select.execute()
    assert _names(select) == ["Ann"]


@pytest.mark.edge_case
def test_unreachable_database_provider_raises(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    provider = engine_connection_provider(engine)

    with pytest.raises(DatabaseConnectionError):
        provider()

    result = Select("users", connection_provider=provider).execute()
    assert result.status is ExecutionStatus.NO_CONNECTION
    assert check_database_available(engine) is False
    engine.dispose()
