import logging
import sqlite3
from contextlib import closing
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class SQLiteMigrator:
    """
    Applies `migrations_dir/*.sql` in filename order.

    Each file starts with its Up part; anything after `-- Down` is ignored.
    Applied filenames are recorded in `_migrations`, so reruns are no-ops.
    """

    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        return conn

    def _pending(self, conn: sqlite3.Connection) -> list[Path]:
        applied = {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        return [p for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in applied]

    def pending_migrations(self) -> list[str]:
        """Filenames not yet applied to this database."""
        with closing(self._connect()) as conn:
            return [p.name for p in self._pending(conn)]

    def run_migrations(self) -> list[str]:
        """Apply every pending migration; returns the filenames applied, in order."""
        applied_now: list[str] = []
        with closing(self._connect()) as conn:
            for path in self._pending(conn):
                logger.info("Applying migration: %s", path.name)
                self._apply(conn, path)
                applied_now.append(path.name)

        logger.info("Migrations up to date (%d applied)", len(applied_now))
        return applied_now

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        up_script = path.read_text().split(DOWN_MARKER, 1)[0]
        try:
            conn.executescript(up_script)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (path.name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
