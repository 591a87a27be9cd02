# wastepay/db/engine.py
"""
Async SQLModel engine and session management.
Supports SQLite (default, via aiosqlite) and any async SQLAlchemy URL.

The engine and session factory are built per application and kept on
``app.state``; services receive an ``AsyncSession`` explicitly.
"""

import os
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Register every table on SQLModel.metadata
from .. import models  # noqa: F401

# Execution option marking a connection that will write (SQLite: BEGIN IMMEDIATE)
IMMEDIATE_WRITE = "wastepay_immediate_write"


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for ``database_url``.

    For SQLite the driver's implicit transaction handling is disabled. Plain
    reads start a deferred transaction; connections opened with the
    ``IMMEDIATE_WRITE`` execution option start with BEGIN IMMEDIATE, so
    check-then-write sequences are serialized between connections. Foreign
    keys are enforced and WAL mode is activated for file databases.
    """
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        database = make_url(database_url).database
        if database and database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)

    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_async_engine(database_url, echo=echo, connect_args=connect_args)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            # aiosqlite must not emit its own BEGIN
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def do_begin(conn):
            if conn.get_execution_options().get(IMMEDIATE_WRITE):
                conn.exec_driver_sql("BEGIN IMMEDIATE")
            else:
                conn.exec_driver_sql("BEGIN")

    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_db_and_tables(engine: AsyncEngine) -> None:
    """Create all tables defined in SQLModel models."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for async SQLModel session injection.
    Usage: session: AsyncSession = Depends(get_session)
    """
    async with request.app.state.session_maker() as session:
        yield session
