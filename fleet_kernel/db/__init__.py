"""Database layer - engine, base classes, types, and exclusion constraints."""

from fleet_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from fleet_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_settings,
    init_engine_from_url,
    session_scope,
)
from fleet_kernel.db.types import LongText, Name, Price, ShortCode, ValueText, round_money

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "init_engine_from_settings",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Price",
    "ShortCode",
    "Name",
    "ValueText",
    "LongText",
    "round_money",
]
