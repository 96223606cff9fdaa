"""SQLite-backed media index mapping image locators to files on disk."""

import logging
import mimetypes
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from photointake.media.exceptions import MediaIndexError

logger = logging.getLogger(__name__)

# Locators handed out by the index look like "content://media/external/images/media/42"
EXTERNAL_CONTENT_URI = "content://media/external/images/media"

# Column holding the on-disk file path of an entry
DATA_COLUMN = "_data"

COLUMNS = ("_id", "locator", DATA_COLUMN, "title", "description", "mime_type", "date_added")

IMAGE_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff", ".tif", ".heic", ".heif",
}


@dataclass
class MediaEntry:
    """A single row of the media index.

    Attributes:
        locator: Opaque URI-like reference to the entry
        path: Filesystem path of the image bytes
        title: Display title (usually the file name)
        description: Free-form description
        mime_type: MIME type of the image
        date_added: When the entry was created
    """
    locator: str
    path: str
    title: str
    description: Optional[str] = None
    mime_type: Optional[str] = None
    date_added: Optional[datetime] = None


class MediaCursor:
    """Read-only result of a media index query.

    Owns its connection; `close()` releases both the cursor and the
    connection. Use as a context manager so it is released on every path.
    """

    def __init__(self, connection: sqlite3.Connection, cursor: sqlite3.Cursor):
        self._connection = connection
        self._cursor = cursor
        self.columns = [description[0] for description in cursor.description]
        self.closed = False

    def column_index(self, name: str) -> int:
        """Return the position of `name` in the projection.

        Raises:
            MediaIndexError: If the column was not projected
        """
        try:
            return self.columns.index(name)
        except ValueError:
            raise MediaIndexError(f"Column not in projection: {name}") from None

    def first(self) -> Optional[tuple]:
        """Return the first row, or None when the query matched nothing."""
        return self._cursor.fetchone()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._cursor.close()
        finally:
            self._connection.close()
            self.closed = True

    def __enter__(self) -> "MediaCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MediaIndex:
    """Manages the image index stored in SQLite.

    New captures get a row (and a destination path inside `media_dir`)
    before any bytes exist, so a camera can be told where to write.
    Existing files are added with `register` or `scan`.

    Attributes:
        db_path: Path of the SQLite database file
        media_dir: Directory where new captures are placed
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        media_dir: Union[str, Path]
    ) -> None:
        self.db_path = Path(db_path).expanduser()
        self.media_dir = Path(media_dir).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.media_dir.mkdir(parents=True, exist_ok=True)
        self._init_db()
        logger.debug(f"Media index ready: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise MediaIndexError(f"Failed to open media index {self.db_path}: {e}") from e

    def _init_db(self) -> None:
        """Create the images table if it doesn't exist."""
        with closing(self._connect()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    _id INTEGER PRIMARY KEY AUTOINCREMENT,
                    locator TEXT UNIQUE,
                    _data TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    mime_type TEXT,
                    date_added TEXT NOT NULL
                )
            """)

    def _add(
        self,
        path: Path,
        title: str,
        description: Optional[str],
        mime_type: Optional[str]
    ) -> str:
        try:
            with closing(self._connect()) as conn, conn:
                cursor = conn.execute(
                    "INSERT INTO images (_data, title, description, mime_type, date_added) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (str(path), title, description, mime_type, datetime.now().isoformat()),
                )
                locator = f"{EXTERNAL_CONTENT_URI}/{cursor.lastrowid}"
                conn.execute(
                    "UPDATE images SET locator = ? WHERE _id = ?",
                    (locator, cursor.lastrowid),
                )
        except sqlite3.Error as e:
            raise MediaIndexError(f"Failed to add {path} to media index: {e}") from e
        return locator

    def insert(
        self,
        title: str,
        description: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> str:
        """Create an entry for an image that is about to be written.

        Args:
            title: File name of the new image inside `media_dir`
            description: Optional description stored with the entry
            mime_type: MIME type; guessed from the title when omitted

        Returns:
            The locator of the new entry
        """
        path = self.media_dir / title
        mime_type = mime_type or mimetypes.guess_type(title)[0]
        locator = self._add(path, title, description, mime_type)
        logger.debug(f"Inserted {locator} -> {path}")
        return locator

    def register(self, path: Union[str, Path], description: Optional[str] = None) -> str:
        """Add an existing image file, or return its locator if already indexed."""
        path = Path(path).expanduser().resolve()
        existing = self.find_by_path(path)
        if existing:
            return existing
        mime_type, _ = mimetypes.guess_type(str(path))
        locator = self._add(path, path.name, description, mime_type)
        logger.info(f"Registered {path} as {locator}")
        return locator

    def scan(self, directory: Union[str, Path]) -> List[str]:
        """Register every image file found under `directory`."""
        directory = Path(directory).expanduser()
        if not directory.is_dir():
            raise MediaIndexError(f"Not a directory: {directory}")

        locators = []
        for item in sorted(directory.rglob("*")):
            if item.is_file() and item.suffix.lower() in IMAGE_EXTENSIONS:
                locators.append(self.register(item))

        logger.info(f"Scanned {directory}: {len(locators)} image(s) indexed")
        return locators

    def find_by_path(self, path: Union[str, Path]) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT locator FROM images WHERE _data = ?", (str(path),)
            ).fetchone()
        return row[0] if row else None

    def query(self, locator: str, projection: Sequence[str]) -> MediaCursor:
        """Look up a locator, returning a cursor over the projected columns.

        Args:
            locator: Locator to look up
            projection: Column names to return

        Returns:
            MediaCursor positioned before the (at most one) matching row.
            The caller must close it.

        Raises:
            MediaIndexError: If a projected column is unknown or the query fails
        """
        unknown = [column for column in projection if column not in COLUMNS]
        if unknown or not projection:
            raise MediaIndexError(f"Invalid projection: {list(projection)}")

        conn = self._connect()
        try:
            cursor = conn.execute(
                f"SELECT {', '.join(projection)} FROM images WHERE locator = ?",
                (locator,),
            )
        except sqlite3.Error as e:
            conn.close()
            raise MediaIndexError(f"Media index query failed for {locator}: {e}") from e
        return MediaCursor(conn, cursor)

    def list_entries(self) -> List[MediaEntry]:
        """List all entries, oldest first."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT locator, _data, title, description, mime_type, date_added "
                "FROM images ORDER BY _id"
            ).fetchall()
        return [
            MediaEntry(
                locator=row[0],
                path=row[1],
                title=row[2],
                description=row[3],
                mime_type=row[4],
                date_added=datetime.fromisoformat(row[5]) if row[5] else None,
            )
            for row in rows
        ]

    def count(self) -> int:
        """Return the number of entries in the index."""
        with closing(self._connect()) as conn:
            return conn.execute("SELECT COUNT(*) FROM images").fetchone()[0]
