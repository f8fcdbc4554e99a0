import sqlite3
import json
import time
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, List

from six_degrees.config import DATABASE_PATH
from six_degrees.models import DeceasedRecord

logger = logging.getLogger(__name__)

# Use database path from config
DATABASE_NAME = str(DATABASE_PATH)


@contextmanager
def get_db():
    """Context manager for database connections with proper timeout"""
    # Set timeout to 20 seconds to handle concurrent writes better
    conn = sqlite3.connect(DATABASE_NAME, timeout=20.0)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception as e:
        conn.rollback()
        raise e
    finally:
        conn.close()


def init_db():
    """Initialize the database with required tables and enable WAL mode"""
    Path(DATABASE_NAME).parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        cursor = conn.cursor()

        # Enable WAL (Write-Ahead Logging) mode for better concurrency
        cursor.execute('PRAGMA journal_mode=WAL')

        # Set busy timeout to 20 seconds (20000 milliseconds)
        cursor.execute('PRAGMA busy_timeout=20000')

        # Bulk-supplied records about deceased actors
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS deceased_persons (
                tmdb_id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                deathday TEXT,
                cause_of_death TEXT,
                age_at_death INTEGER,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS searches (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                actor_a_id INTEGER NOT NULL,
                actor_b_id INTEGER NOT NULL,
                degrees INTEGER,
                path TEXT NOT NULL,
                success INTEGER NOT NULL,
                error_message TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_searches_created_at ON searches(created_at DESC)
        ''')

    logger.info(f"Database initialized at {DATABASE_NAME}")


def upsert_deceased_persons(records: Iterable[DeceasedRecord]) -> int:
    """
    Insert or replace deceased-person records in a single transaction

    Args:
        records: Records to store, keyed by their TMDb id

    Returns:
        int: Number of records written
    """
    rows = [
        (r.id, r.name, r.deathday, r.cause_of_death, r.age_at_death)
        for r in records
    ]
    if not rows:
        return 0

    with get_db() as conn:
        conn.executemany('''
            INSERT INTO deceased_persons (tmdb_id, name, deathday, cause_of_death, age_at_death)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(tmdb_id) DO UPDATE SET
                name = excluded.name,
                deathday = excluded.deathday,
                cause_of_death = excluded.cause_of_death,
                age_at_death = excluded.age_at_death,
                updated_at = CURRENT_TIMESTAMP
        ''', rows)

    return len(rows)


def get_deceased_persons(actor_ids: List[int]) -> Dict[int, DeceasedRecord]:
    """
    Bulk lookup of deceased-person records

    Args:
        actor_ids: TMDb ids to look up

    Returns:
        Mapping of id -> record for the ids present in the store
    """
    if not actor_ids:
        return {}

    placeholders = ','.join('?' for _ in actor_ids)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f'''
            SELECT tmdb_id, name, deathday, cause_of_death, age_at_death
            FROM deceased_persons
            WHERE tmdb_id IN ({placeholders})
        ''', list(actor_ids))
        rows = cursor.fetchall()

    return {
        row['tmdb_id']: DeceasedRecord(
            id=row['tmdb_id'],
            name=row['name'],
            deathday=row['deathday'],
            cause_of_death=row['cause_of_death'],
            age_at_death=row['age_at_death']
        )
        for row in rows
    }


def save_search(actor_a_id, actor_b_id, path, degrees, success, error_message=None, max_retries=3):
    """
    Save a connection search to the database with retry logic for concurrent write handling

    Args:
        actor_a_id: Starting actor id
        actor_b_id: Target actor id
        path: Actor ids on the found path (empty when none was found)
        degrees: Degrees of separation, or None when no path was found
        success: Whether a connection was found
        error_message: Optional error message
        max_retries: Maximum number of retry attempts (default: 3)

    Returns:
        int: The ID of the inserted search record

    Raises:
        sqlite3.OperationalError: If database remains locked after all retries
    """
    for attempt in range(max_retries):
        try:
            with get_db() as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    INSERT INTO searches
                    (actor_a_id, actor_b_id, degrees, path, success, error_message)
                    VALUES (?, ?, ?, ?, ?, ?)
                ''', (actor_a_id, actor_b_id, degrees, json.dumps(path or []), 1 if success else 0, error_message))

                return cursor.lastrowid

        except sqlite3.OperationalError as e:
            error_str = str(e).lower()
            if ('locked' in error_str or 'busy' in error_str) and attempt < max_retries - 1:
                # Exponential backoff: 0.1s, 0.2s, 0.4s
                sleep_time = 0.1 * (2 ** attempt)
                logger.warning(f"Database locked, retrying in {sleep_time}s (attempt {attempt + 1}/{max_retries})")
                time.sleep(sleep_time)
                continue
            raise


def get_recent_searches(limit=50) -> List[dict]:
    """Most recent searches first, with the path decoded"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            SELECT id, actor_a_id, actor_b_id, degrees, path, success, error_message, created_at
            FROM searches
            ORDER BY created_at DESC, id DESC
            LIMIT ?
        ''', (limit,))
        rows = cursor.fetchall()

    searches = []
    for row in rows:
        search = dict(row)
        search['path'] = json.loads(search['path']) if search['path'] else []
        search['success'] = bool(search['success'])
        searches.append(search)
    return searches
