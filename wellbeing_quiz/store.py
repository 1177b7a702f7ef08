"""Assessment persistence.

This module owns everything that touches stored assessments:

``StoreConnection``
    A handle over the Flask-SQLAlchemy database with an explicit
    lifecycle. Its state is ``connecting`` until ``connect()`` has
    pinged the database, then ``connected`` or ``disconnected``. Nothing
    queries the database unless the state is ``connected``.

``AssessmentStore``
    Inserts assessments and answers the aggregate queries (average,
    distribution, history, latest). Database failures surface as
    ``StoreUnavailableError``.

``BackgroundWriter``
    Submit-and-detach writes for the calculation endpoint. A write is
    handed to a thread pool and the caller moves on; failures are
    logged and not retried.

One instance of each is created per application by the factory and
kept in ``app.extensions``, so tests can swap any of them for a fake.
"""
from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, func, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .db import db as default_db
from .errors import StoreUnavailableError
from .models import Assessment, AssessmentRecord

logger = logging.getLogger(__name__)

DEFAULT_LATEST_LIMIT = 10
MAX_LATEST_LIMIT = 100

# (name, lower bound inclusive, upper bound exclusive); together they cover 0-100.
SCORE_BUCKETS: Tuple[Tuple[str, int, int], ...] = (
    ("excellent", 90, 101),
    ("good", 75, 90),
    ("moderate", 60, 75),
    ("fair", 40, 60),
    ("poor", 0, 40),
)


def empty_distribution() -> Dict[str, int]:
    """Return a distribution with every bucket set to zero."""
    return {name: 0 for name, _, _ in SCORE_BUCKETS}


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class StoreConnection:
    """Connectivity state for the assessment database.

    ``connect()`` and every store operation need an application
    context because the database engine is bound to the Flask app.
    """

    def __init__(self, database=None) -> None:
        self.db = database if database is not None else default_db
        self.state = ConnectionState.CONNECTING
        self.last_error: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def connect(self) -> ConnectionState:
        """Ping the database and record whether it answered."""
        try:
            with self.db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self.mark_disconnected(exc)
            logger.warning(
                "Assessment store is unreachable, continuing without it: %s", exc
            )
        else:
            with self._lock:
                if self.state is not ConnectionState.CONNECTED:
                    logger.info("Connected to assessment store")
                self.state = ConnectionState.CONNECTED
                self.last_error = None
        return self.state

    def mark_disconnected(self, exc: Exception | None = None) -> None:
        with self._lock:
            self.state = ConnectionState.DISCONNECTED
            self.last_error = str(exc) if exc is not None else None

    def close(self) -> None:
        """Release pooled connections and stop serving store operations."""
        self.db.engine.dispose()
        with self._lock:
            self.state = ConnectionState.DISCONNECTED


class AssessmentStore:
    """Queries over stored assessments.

    Every method raises ``StoreUnavailableError`` when the connection is
    not ``connected`` or the database reports an error.
    """

    def __init__(self, connection: StoreConnection) -> None:
        self.connection = connection

    @property
    def session(self):
        return self.connection.db.session

    def _require_connection(self) -> None:
        if not self.connection.is_connected:
            raise StoreUnavailableError(
                f"Assessment store is {self.connection.state.value}"
            )

    def _fail(self, exc: SQLAlchemyError, action: str) -> StoreUnavailableError:
        self.session.rollback()
        if isinstance(exc, DBAPIError) and exc.connection_invalidated:
            self.connection.mark_disconnected(exc)
        logger.warning("Failed to %s: %s", action, exc)
        return StoreUnavailableError(f"Failed to {action}: {exc.__class__.__name__}")

    def insert(self, record: AssessmentRecord) -> str:
        """Persist ``record`` and return the new assessment's identifier."""
        self._require_connection()
        assessment = Assessment.from_record(record)
        try:
            self.session.add(assessment)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "save assessment") from exc
        return assessment.id

    def average_score(self) -> Optional[float]:
        """Return the mean score of all assessments, or ``None`` if there are none."""
        self._require_connection()
        try:
            average = self.session.query(func.avg(Assessment.score)).scalar()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "compute average score") from exc
        return float(average) if average is not None else None

    def score_distribution(self) -> Dict[str, int]:
        """Return the number of assessments in each score bucket."""
        self._require_connection()
        bucket = case(
            *[
                ((Assessment.score >= lower) & (Assessment.score < upper), name)
                for name, lower, upper in SCORE_BUCKETS
            ]
        ).label("bucket")
        try:
            rows = (
                self.session.query(bucket, func.count(Assessment.id))
                .group_by(bucket)
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fail(exc, "compute score distribution") from exc
        distribution = empty_distribution()
        for name, count in rows:
            if name in distribution:
                distribution[name] = count
        return distribution

    def user_history(self, user_id: str) -> List[Assessment]:
        """Return ``user_id``'s assessments, newest first."""
        self._require_connection()
        try:
            return (
                Assessment.query
                .filter_by(user_id=user_id)
                .order_by(Assessment.timestamp.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fail(exc, "load user history") from exc

    def latest(self, limit: int = DEFAULT_LATEST_LIMIT) -> List[Assessment]:
        """Return the ``limit`` most recent assessments, newest first."""
        self._require_connection()
        try:
            return (
                Assessment.query
                .order_by(Assessment.timestamp.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fail(exc, "load latest assessments") from exc


class BackgroundWriter:
    """Fire-and-forget assessment writes.

    ``submit`` returns as soon as the write is queued. The write runs
    on a worker thread inside its own application context. A failed
    write is logged and dropped: there is no retry and the outcome is
    never reported back to the request that queued it.
    """

    def __init__(self, store: AssessmentStore, max_workers: int = 2) -> None:
        self.store = store
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="assessment-writer"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, app, record: AssessmentRecord) -> Future:
        """Queue ``record`` for insertion and return without waiting."""
        future = self._executor.submit(self._write, app, record)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._finished)
        return future

    def _write(self, app, record: AssessmentRecord) -> Optional[str]:
        with app.app_context():
            try:
                assessment_id = self.store.insert(record)
            except StoreUnavailableError as exc:
                logger.warning("Detached assessment write dropped: %s", exc.message)
                return None
        logger.debug("Detached assessment write stored %s", assessment_id)
        return assessment_id

    def _finished(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Detached assessment write failed unexpectedly",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for queued writes; return ``True`` if none are left."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
