"""Tests for the storage handle and its transaction scope."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import InventoryItemRow, SupplierRow
from cafe_backoffice.exceptions import StorageFailureError


def test_session_scope_commits(database: Database) -> None:
    with database.session_scope() as session:
        session.add(SupplierRow(name="Valley Dairy Co."))

    with database.session_scope() as session:
        names = session.execute(select(SupplierRow.name)).scalars().all()

    assert names == ["Valley Dairy Co."]


def test_session_scope_rolls_back_on_error(database: Database) -> None:
    with pytest.raises(ValueError):
        with database.session_scope() as session:
            session.add(SupplierRow(name="Valley Dairy Co."))
            session.flush()
            raise ValueError("abort")

    with database.session_scope() as session:
        assert session.execute(select(SupplierRow)).first() is None


def test_store_errors_become_storage_failures(database: Database) -> None:
    with pytest.raises(StorageFailureError) as exc_info:
        with database.session_scope() as session:
            session.add(InventoryItemRow(name="Oat Milk", quantity=Decimal("-1"), unit="L"))

    assert exc_info.value.code == "STORAGE_FAILURE"
    with database.session_scope() as session:
        assert session.execute(select(InventoryItemRow)).first() is None


def test_foreign_keys_are_enforced(database: Database) -> None:
    with pytest.raises(StorageFailureError):
        with database.session_scope() as session:
            session.add(InventoryItemRow(name="Oat Milk", quantity=Decimal("1"), supplier_id=42))


def test_savepoint_rolls_back_only_inner_work(database: Database) -> None:
    with database.session_scope() as session:
        session.add(SupplierRow(name="Kept"))
        savepoint = session.begin_nested()
        session.add(SupplierRow(name="Discarded"))
        session.flush()
        savepoint.rollback()

    with database.session_scope() as session:
        names = session.execute(select(SupplierRow.name)).scalars().all()

    assert names == ["Kept"]


def test_from_settings(settings: Settings) -> None:
    database = Database.from_settings(settings)

    assert database.url == settings.database_url
    assert database.is_sqlite is True
    assert database.engine is None

    database.connect()
    assert database.engine is not None
    database.disconnect()
    assert database.engine is None
