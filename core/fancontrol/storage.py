"""
SQLite storage for measurements and the fan configuration.

Each operation opens a short-lived connection and runs in its own
transaction. Times are stored as epoch milliseconds (UTC).
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Optional

from .exceptions import StorageError
from .models import IndoorMeasurement, OutdoorMeasurement
from .settings import FanControlSettings

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS config (
        config TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS outdoor_measurement (
        time BIGINT NOT NULL,
        temperature REAL NOT NULL,
        rel_humidity REAL NOT NULL,
        battery REAL NOT NULL DEFAULT 0,
        PRIMARY KEY (time)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS indoor_measurement (
        time BIGINT NOT NULL,
        temperature REAL NOT NULL,
        rel_humidity REAL NOT NULL,
        window_open INT NOT NULL,
        PRIMARY KEY (time)
    )
    """,
]


def _to_millis(time: datetime) -> int:
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    return int(time.timestamp() * 1000)


def _from_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)


class MeasurementStore:
    """Measurement history and the persisted configuration."""

    def __init__(self, db_path: str = "db.sqlite"):
        self.db_path = db_path
        self.lock = threading.Lock()

    def _execute(self, statements: list[tuple[str, tuple]]) -> list[list[sqlite3.Row]]:
        """Run statements in one transaction and return the rows of each."""
        with self.lock:
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.Error as e:
                raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
            conn.row_factory = sqlite3.Row
            try:
                with conn:
                    return [conn.execute(sql, params).fetchall() for sql, params in statements]
            except sqlite3.Error as e:
                raise StorageError(f"Database operation failed: {e}") from e
            finally:
                conn.close()

    def init_schema(self):
        """Create tables if they do not exist."""
        self._execute([(sql, ()) for sql in SCHEMA])
        logger.info(f"Database schema ready at {self.db_path}")

    # Configuration

    def load_config_dict(self) -> Optional[dict]:
        """Raw stored configuration document, or None if nothing was saved yet."""
        (rows,) = self._execute([("SELECT config FROM config LIMIT 1", ())])
        if not rows:
            return None
        try:
            return json.loads(rows[0]["config"])
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored configuration is not valid JSON: {e}") from e

    def load_config(self) -> FanControlSettings:
        """Stored configuration, or the defaults if none was saved."""
        data = self.load_config_dict()
        if data is None:
            return FanControlSettings()
        return FanControlSettings.from_dict(data)

    def save_config(self, settings: FanControlSettings):
        """Replace the stored configuration (there is only ever one row)."""
        self._execute([
            ("DELETE FROM config", ()),
            ("INSERT INTO config(config) VALUES (?)", (json.dumps(settings.to_dict()),)),
        ])
        logger.info("Configuration saved")

    # Outdoor measurements

    def save_outdoor(self, measurement: OutdoorMeasurement):
        self._execute([(
            "INSERT OR REPLACE INTO outdoor_measurement(time, temperature, rel_humidity, battery) "
            "VALUES (?, ?, ?, ?)",
            (
                _to_millis(measurement.time),
                measurement.temperature,
                measurement.relative_humidity,
                measurement.battery,
            ),
        )])

    def load_outdoor(
        self,
        time_range: Optional[tuple[datetime, datetime]] = None,
        limit: int = 1000,
    ) -> list[OutdoorMeasurement]:
        """Outdoor measurements, newest first.

        Args:
            time_range: Inclusive (start, end) filter, or None for all
            limit: Maximum number of rows
        """
        columns = "time, temperature, rel_humidity, battery"
        if time_range is not None:
            start, end = time_range
            query = (
                f"SELECT {columns} FROM outdoor_measurement WHERE time >= ? AND time <= ? "
                "ORDER BY time DESC LIMIT ?",
                (_to_millis(start), _to_millis(end), limit),
            )
        else:
            query = (f"SELECT {columns} FROM outdoor_measurement ORDER BY time DESC LIMIT ?", (limit,))

        (rows,) = self._execute([query])
        return [
            OutdoorMeasurement(
                time=_from_millis(row["time"]),
                temperature=row["temperature"],
                relative_humidity=row["rel_humidity"],
                battery=row["battery"],
            )
            for row in rows
        ]

    def load_latest_outdoor(self) -> Optional[OutdoorMeasurement]:
        measurements = self.load_outdoor(None, limit=1)
        return measurements[0] if measurements else None

    # Indoor measurements

    def save_indoor(self, measurement: IndoorMeasurement):
        self._execute([(
            "INSERT OR REPLACE INTO indoor_measurement(time, temperature, rel_humidity, window_open) "
            "VALUES (?, ?, ?, ?)",
            (
                _to_millis(measurement.time),
                measurement.temperature,
                measurement.relative_humidity,
                1 if measurement.window_open else 0,
            ),
        )])

    def load_indoor(
        self,
        time_range: Optional[tuple[datetime, datetime]] = None,
        limit: int = 1000,
    ) -> list[IndoorMeasurement]:
        """Indoor measurements, newest first."""
        columns = "time, temperature, rel_humidity, window_open"
        if time_range is not None:
            start, end = time_range
            query = (
                f"SELECT {columns} FROM indoor_measurement WHERE time >= ? AND time <= ? "
                "ORDER BY time DESC LIMIT ?",
                (_to_millis(start), _to_millis(end), limit),
            )
        else:
            query = (f"SELECT {columns} FROM indoor_measurement ORDER BY time DESC LIMIT ?", (limit,))

        (rows,) = self._execute([query])
        return [
            IndoorMeasurement(
                time=_from_millis(row["time"]),
                temperature=row["temperature"],
                relative_humidity=row["rel_humidity"],
                window_open=row["window_open"] > 0,
            )
            for row in rows
        ]
