"""
Tests for engine and session management.

session_scope() owns the transaction: commit on success, rollback on any
exception.  Services only flush.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from fleet_kernel.config import DatabaseSettings, KernelSettings, LoggingSettings
from fleet_kernel.db.constraints import violated_constraint
from fleet_kernel.db.engine import (
    get_engine,
    init_engine_from_settings,
    is_postgres,
    reset_engine,
    session_scope,
)
from fleet_kernel.domain.attributes import AttributeCategory, AttributeDataType
from fleet_kernel.models.attribute_type import AttributeType
from fleet_kernel.services.attribute_type_service import AttributeTypeService


def _count_types() -> int:
    with session_scope() as session:
        return session.execute(select(func.count()).select_from(AttributeType)).scalar_one()


def _create_type(session, code: str, actor_id) -> None:
    AttributeTypeService(session).create_attribute_type(
        code=code,
        name=code.title(),
        category=AttributeCategory.PERMIT,
        data_type=AttributeDataType.STRING,
        actor_id=actor_id,
    )


class TestSessionScope:

    def test_commits_on_success(self, db_engine, test_actor_id):
        with session_scope() as session:
            _create_type(session, "MEDALLION", test_actor_id)

        assert _count_types() == 1

    def test_rolls_back_on_error(self, db_engine, test_actor_id, captured_logs):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                _create_type(session, "MEDALLION", test_actor_id)
                raise RuntimeError("caller failed after flush")

        assert _count_types() == 0
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())


class TestEngineLifecycle:

    def test_get_engine_requires_init(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()

    def test_init_from_settings(self):
        settings = KernelSettings(
            database=DatabaseSettings(url="sqlite://"),
            logging=LoggingSettings(level="DEBUG"),
        )
        try:
            engine = init_engine_from_settings(settings)
            assert engine.dialect.name == "sqlite"
            assert not is_postgres()
        finally:
            reset_engine()

    def test_violated_constraint_without_driver_diagnostics(self, db_engine, session, test_actor_id):
        session.add(
            AttributeType(
                code="DUP",
                name="Dup",
                category="PERMIT",
                data_type="STRING",
                requires_value=False,
                is_active=True,
                created_by_id=test_actor_id,
            )
        )
        session.add(
            AttributeType(
                code="DUP",
                name="Dup",
                category="PERMIT",
                data_type="STRING",
                requires_value=False,
                is_active=True,
                created_by_id=test_actor_id,
            )
        )
        with pytest.raises(IntegrityError) as exc_info:
            session.flush()

        if not is_postgres():
            assert violated_constraint(exc_info.value) is None
