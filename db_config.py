"""
Centralized Database Configuration - SQLite
One database file holds every collection (students, authorities, admins,
complaints, feedback, notifications).

Usage:
    from db_config import db_connection

    with db_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM complaints")
"""
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime

import pytz

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%fZ'


# ============================================
# Timestamps
# ============================================

def utc_now() -> datetime:
    """Current time in UTC (patched in tests to move the clock)"""
    return datetime.now(pytz.utc)


def to_timestamp(value: datetime) -> str:
    """Fixed-width UTC string so that lexical order matches time order"""
    return value.astimezone(pytz.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return pytz.utc.localize(datetime.strptime(value, TIMESTAMP_FORMAT))


def now_timestamp() -> str:
    return to_timestamp(utc_now())


# ============================================
# Connections
# ============================================

def get_db_connection(db_path: str):
    """
    Get SQLite database connection.

    Args:
        db_path: Path of the SQLite file (directory is created if missing)

    Returns:
        sqlite3 connection with WAL journaling and foreign keys enabled
    """
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=30, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


@contextmanager
def db_connection(db_path: str):
    """
    Context manager for safe database connections.
    Auto-commits on success, rolls back on error, always closes.
    """
    conn = get_db_connection(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def row_to_dict(row):
    return dict(row) if row is not None else None


# ============================================
# Schema
# ============================================

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS students (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        roll_no TEXT UNIQUE NOT NULL,
        email TEXT UNIQUE NOT NULL,
        mobile TEXT NOT NULL,
        session TEXT NOT NULL,
        department TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        hostel_no INTEGER,
        room_no TEXT,
        is_verified INTEGER DEFAULT 0,
        verification_otp TEXT,
        verification_otp_expires TEXT,
        reset_otp TEXT,
        reset_otp_expires TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS authorities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        mobile TEXT NOT NULL,
        designation TEXT NOT NULL,
        department TEXT,
        hostel_no INTEGER,
        password_hash TEXT NOT NULL,
        is_verified INTEGER DEFAULT 0,
        verification_otp TEXT,
        verification_otp_expires TEXT,
        reset_otp TEXT,
        reset_otp_expires TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admins (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        reset_otp TEXT,
        reset_otp_expires TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS complaints (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        token TEXT UNIQUE NOT NULL,
        student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
        type TEXT NOT NULL,
        hostel_no INTEGER,
        room_no TEXT,
        sub_type TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Pending',
        assigned_to INTEGER REFERENCES authorities(id) ON DELETE SET NULL,
        remarks TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS feedback (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
        complaint_id INTEGER NOT NULL REFERENCES complaints(id) ON DELETE CASCADE,
        rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
        comments TEXT,
        created_at TEXT NOT NULL,
        UNIQUE(student_id, complaint_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        message TEXT NOT NULL,
        hostel TEXT NOT NULL,
        pdf_url TEXT,
        created_by TEXT,
        created_at TEXT NOT NULL
    )
    """,
    # Indexes for the listing queries
    "CREATE INDEX IF NOT EXISTS idx_complaints_student ON complaints(student_id, created_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_complaints_assigned ON complaints(assigned_to, status)",
    "CREATE INDEX IF NOT EXISTS idx_complaints_type ON complaints(type, sub_type)",
    "CREATE INDEX IF NOT EXISTS idx_authorities_routing ON authorities(designation, department, hostel_no)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_hostel ON notifications(hostel, created_at DESC)",
]


def init_database(db_path: str):
    """Create all tables and indexes if they don't exist"""
    with db_connection(db_path) as conn:
        for statement in SCHEMA:
            conn.execute(statement)
