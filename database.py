import sqlite3
import os
import json
import uuid
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

import pytz

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: str = None):
        """Initialize SQLite database"""
        if db_path is None:
            # Create data directory if it doesn't exist
            data_dir = os.path.join(os.getcwd(), 'data')
            os.makedirs(data_dir, exist_ok=True)
            self.db_path = os.path.join(data_dir, "offline_gateway.db")
        else:
            db_dir = os.path.dirname(db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
            self.db_path = db_path

        # sqlite serializes writers itself; this only keeps put/replace atomic per process
        self.lock = threading.Lock()
        self.init_database()

    def init_database(self):
        """Initialize database tables"""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                cursor.execute('''
                    CREATE TABLE IF NOT EXISTS cache_partitions (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT UNIQUE NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                ''')

                cursor.execute('''
                    CREATE TABLE IF NOT EXISTS cache_entries (
                        cache_name TEXT NOT NULL,
                        request_key TEXT NOT NULL,
                        url TEXT NOT NULL,
                        status INTEGER NOT NULL,
                        headers TEXT NOT NULL,
                        body BLOB,
                        stored_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        PRIMARY KEY (cache_name, request_key)
                    )
                ''')

                cursor.execute('''
                    CREATE TABLE IF NOT EXISTS offline_submissions (
                        id TEXT PRIMARY KEY,
                        kind TEXT NOT NULL,
                        payload TEXT NOT NULL,
                        enqueued_at TEXT NOT NULL
                    )
                ''')

                cursor.execute('CREATE INDEX IF NOT EXISTS idx_submissions_kind ON offline_submissions(kind, enqueued_at)')

                conn.commit()
                logger.info(f"Database initialized successfully at {self.db_path}")

        except Exception as e:
            logger.error(f"Error initializing database: {e}")
            raise

    # Cache partitions

    def open_cache(self, cache_name: str):
        """Create a partition row if it does not exist yet."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute('INSERT OR IGNORE INTO cache_partitions (name) VALUES (?)', (cache_name,))
            conn.commit()

    def has_cache(self, cache_name: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute('SELECT 1 FROM cache_partitions WHERE name = ?', (cache_name,)).fetchone()
            return row is not None

    def delete_cache(self, cache_name: str) -> bool:
        """Delete a partition and every entry in it."""
        with self.lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM cache_entries WHERE cache_name = ?', (cache_name,))
            cursor.execute('DELETE FROM cache_partitions WHERE name = ?', (cache_name,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

    def cache_names(self) -> List[str]:
        """Partition names in creation order."""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute('SELECT name FROM cache_partitions ORDER BY seq').fetchall()
            return [row[0] for row in rows]

    def get_entry(self, cache_name: str, key: str) -> Optional[Dict[str, Any]]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute('''
                SELECT url, status, headers, body FROM cache_entries
                WHERE cache_name = ? AND request_key = ?
            ''', (cache_name, key)).fetchone()

            if row is None:
                return None

            return {
                'url': row['url'],
                'status': row['status'],
                'headers': json.loads(row['headers']),
                'body': bytes(row['body'] or b''),
            }

    def put_entry(self, cache_name: str, key: str, record: Dict[str, Any]):
        """Store a response record; an existing entry under the key is replaced."""
        with self.lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('INSERT OR IGNORE INTO cache_partitions (name) VALUES (?)', (cache_name,))
            cursor.execute('''
                INSERT OR REPLACE INTO cache_entries (cache_name, request_key, url, status, headers, body, stored_at)
                VALUES (?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            ''', (
                cache_name,
                key,
                record.get('url', ''),
                record.get('status', 200),
                json.dumps(record.get('headers', {})),
                sqlite3.Binary(record.get('body') or b''),
            ))
            conn.commit()

    def delete_entry(self, cache_name: str, key: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM cache_entries WHERE cache_name = ? AND request_key = ?', (cache_name, key))
            conn.commit()
            return cursor.rowcount > 0

    def entry_keys(self, cache_name: str) -> List[str]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute('''
                SELECT request_key FROM cache_entries
                WHERE cache_name = ? ORDER BY rowid
            ''', (cache_name,)).fetchall()
            return [row[0] for row in rows]

    # Offline form submissions

    def enqueue_submission(self, kind: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a form submission that could not be sent."""
        submission = {
            'id': uuid.uuid4().hex,
            'kind': kind,
            'payload': payload,
            'enqueued_at': datetime.now(pytz.utc).isoformat(),
        }

        with sqlite3.connect(self.db_path) as conn:
            conn.execute('''
                INSERT INTO offline_submissions (id, kind, payload, enqueued_at)
                VALUES (?, ?, ?, ?)
            ''', (submission['id'], kind, json.dumps(payload), submission['enqueued_at']))
            conn.commit()

        logger.info(f"Queued offline {kind} submission {submission['id']}")
        return submission

    def get_submissions(self, kind: str) -> List[Dict[str, Any]]:
        """Get queued submissions of one kind, oldest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute('''
                SELECT id, kind, payload, enqueued_at FROM offline_submissions
                WHERE kind = ?
                ORDER BY enqueued_at, rowid
            ''', (kind,)).fetchall()

            return [
                {
                    'id': row['id'],
                    'kind': row['kind'],
                    'payload': json.loads(row['payload']),
                    'enqueued_at': row['enqueued_at'],
                }
                for row in rows
            ]

    def remove_submission(self, submission_id: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM offline_submissions WHERE id = ?', (submission_id,))
            conn.commit()
            return cursor.rowcount > 0

    def count_submissions(self) -> Dict[str, int]:
        """Pending submissions per kind."""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute('SELECT kind, COUNT(*) FROM offline_submissions GROUP BY kind').fetchall()
            return {kind: count for kind, count in rows}

    def get_stats(self) -> Dict:
        """Get database statistics"""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                caches = {}
                cursor.execute('''
                    SELECT p.name, COUNT(e.request_key), COALESCE(SUM(LENGTH(e.body)), 0)
                    FROM cache_partitions p
                    LEFT JOIN cache_entries e ON e.cache_name = p.name
                    GROUP BY p.name
                    ORDER BY p.seq
                ''')
                for name, entries, size in cursor.fetchall():
                    caches[name] = {'entries': entries, 'size_bytes': size}

                cursor.execute('SELECT COUNT(*) FROM offline_submissions')
                total_submissions = cursor.fetchone()[0]

                file_size = os.path.getsize(self.db_path) if os.path.exists(self.db_path) else 0

                return {
                    'backend': 'sqlite',
                    'total_caches': len(caches),
                    'caches': caches,
                    'total_entries': sum(c['entries'] for c in caches.values()),
                    'total_submissions': total_submissions,
                    'file_size_mb': round(file_size / (1024 * 1024), 2)
                }

        except Exception as e:
            logger.error(f"Error getting database stats: {e}")
            return {}


def init_database(db_path: Optional[str] = None) -> Database:
    """Open the database, creating its tables on first use."""
    try:
        database = Database(db_path)
        logger.info("Database initialized successfully")
        return database
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
