import sqlite3
import os
import contextlib
from table_quantities.settings import get_world_dir

def get_db_path() -> str:
    """Returns the path to the SQLite database for the active world."""
    root = get_world_dir()
    os.makedirs(root, exist_ok=True)
    return os.path.join(root, "world_state.db")

@contextlib.contextmanager
def get_db_connection():
    """Context manager for SQLite database connections."""
    db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    # Enable accessing columns by name
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

def init_db():
    """Initializes the database schema if tables don't exist."""
    with get_db_connection() as conn:
        cursor = conn.cursor()

        # Characters Table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS characters (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # Inventory Table (one row per created item; source_uuid links back to the world item)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS inventory (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                character_id INTEGER NOT NULL,
                item_name TEXT NOT NULL,
                source_uuid TEXT,
                quantity INTEGER DEFAULT 1,
                data_json TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (character_id) REFERENCES characters (id)
            )
        ''')
