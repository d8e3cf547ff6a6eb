"""SQLite initialization and async connection management via aiosqlite."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import aiosqlite

DATABASE_URL = os.getenv("DATABASE_URL", "data/kennel.db")

__all__ = [
    "DATABASE_URL", "create_tables", "get_db",
    "_CREATE_DOGS", "_CREATE_PURCHASES", "_CREATE_SALES", "_CREATE_EXPENSES",
    "_CREATE_HEALTH_RECORDS", "_CREATE_LITTERS", "_CREATE_ANALYSIS_REPORTS", "_ALL_TABLES",
]

# The record tables are owned by the business application; these
# definitions mirror its columns so a local database can be read.
_CREATE_DOGS = """
CREATE TABLE IF NOT EXISTS dogs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    breed       TEXT,
    gender      TEXT    NOT NULL,
    birth_date  TEXT    NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'owned',
    weight      REAL,
    created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""

_CREATE_PURCHASES = """
CREATE TABLE IF NOT EXISTS purchases (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    dog_id         INTEGER NOT NULL REFERENCES dogs(id) ON DELETE CASCADE,
    amount         REAL    NOT NULL,
    purchase_date  TEXT    NOT NULL
)
"""

_CREATE_SALES = """
CREATE TABLE IF NOT EXISTS sales (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    dog_id     INTEGER NOT NULL REFERENCES dogs(id) ON DELETE CASCADE,
    amount     REAL    NOT NULL,
    sale_date  TEXT    NOT NULL,
    litter_id  INTEGER REFERENCES litters(id) ON DELETE SET NULL
)
"""

_CREATE_EXPENSES = """
CREATE TABLE IF NOT EXISTS expenses (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    dog_id        INTEGER REFERENCES dogs(id) ON DELETE CASCADE,
    amount        REAL    NOT NULL,
    category      TEXT    NOT NULL DEFAULT 'other',
    expense_date  TEXT    NOT NULL,
    description   TEXT,
    litter_id     INTEGER REFERENCES litters(id) ON DELETE SET NULL
)
"""

_CREATE_HEALTH_RECORDS = """
CREATE TABLE IF NOT EXISTS health_records (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    dog_id          INTEGER NOT NULL REFERENCES dogs(id) ON DELETE CASCADE,
    record_type     TEXT    NOT NULL,
    treatment_type  TEXT,
    description     TEXT,
    record_date     TEXT    NOT NULL,
    veterinarian    TEXT,
    cost            REAL
)
"""

_CREATE_LITTERS = """
CREATE TABLE IF NOT EXISTS litters (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    mother_id            INTEGER NOT NULL REFERENCES dogs(id) ON DELETE CASCADE,
    father_id            INTEGER NOT NULL REFERENCES dogs(id) ON DELETE CASCADE,
    mating_date          TEXT    NOT NULL,
    birth_date           TEXT,
    expected_birth_date  TEXT,
    puppies_count        INTEGER DEFAULT 0,
    notes                TEXT
)
"""

_CREATE_ANALYSIS_REPORTS = """
CREATE TABLE IF NOT EXISTS analysis_reports (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    role                TEXT    NOT NULL,
    analyses_json       TEXT    NOT NULL DEFAULT '{}',
    combined_analysis   TEXT,
    failed_roles_json   TEXT    NOT NULL DEFAULT '[]',
    summary_json        TEXT    NOT NULL,
    created_at          TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""

_ALL_TABLES = [
    _CREATE_DOGS,
    _CREATE_LITTERS,
    _CREATE_PURCHASES,
    _CREATE_SALES,
    _CREATE_EXPENSES,
    _CREATE_HEALTH_RECORDS,
    _CREATE_ANALYSIS_REPORTS,
]


async def create_tables(db_url: str = DATABASE_URL) -> None:
    """Create all application tables if they don't exist."""
    os.makedirs(os.path.dirname(db_url) if os.path.dirname(db_url) else ".", exist_ok=True)
    async with aiosqlite.connect(db_url) as db:
        await db.execute("PRAGMA foreign_keys = ON")
        for ddl in _ALL_TABLES:
            await db.execute(ddl)
        await db.commit()


@asynccontextmanager
async def get_db(db_url: str = DATABASE_URL) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Context manager that provides a SQLite connection with foreign keys enabled."""
    async with aiosqlite.connect(db_url) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db
