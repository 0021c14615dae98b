"""SQLite store for subscriptions, jobs, conversations, messages, boosts and profile views.

This is the persistence side of the gates: it only reads rows and counts and
hands them to the pure resolver as snapshots. Timestamps are ISO-8601 text;
keep them consistently naive or consistently aware so range filters compare
correctly.
"""

import sqlite3
from datetime import datetime
from pathlib import Path

from cuidly.core.schemas import (
    ACTIVE_STATUSES,
    ConversationThread,
    FamilyLookup,
    JobSnapshot,
    NannyLookup,
    SubscriptionPlan,
    SubscriptionSnapshot,
    SubscriptionStatus,
    parse_plan,
)

_SUBSCRIPTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS subscriptions (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    nanny_id             INTEGER UNIQUE,
    family_id            INTEGER UNIQUE,
    plan                 TEXT    NOT NULL,
    status               TEXT    NOT NULL DEFAULT 'ACTIVE',
    current_period_start TEXT    NOT NULL,
    current_period_end   TEXT    NOT NULL,
    CHECK ((nanny_id IS NULL) != (family_id IS NULL))
);
"""

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    family_id   INTEGER NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'ACTIVE',
    created_at  TEXT    NOT NULL
);
"""

_CONVERSATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS conversations (
    id          TEXT    PRIMARY KEY,
    job_id      INTEGER,
    family_id   INTEGER NOT NULL,
    nanny_id    INTEGER NOT NULL,
    created_at  TEXT    NOT NULL
);
"""

_MESSAGES_TABLE = """
CREATE TABLE IF NOT EXISTS messages (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id  TEXT    NOT NULL,
    seq              INTEGER NOT NULL,
    sender_nanny_id  INTEGER,
    sender_family_id INTEGER,
    body             TEXT    NOT NULL DEFAULT '',
    deleted_at       TEXT,
    created_at       TEXT    NOT NULL,
    UNIQUE(conversation_id, seq)
);
"""

_BOOSTS_TABLE = """
CREATE TABLE IF NOT EXISTS boosts (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    type        TEXT    NOT NULL,
    job_id      INTEGER,
    nanny_id    INTEGER,
    created_at  TEXT    NOT NULL
);
"""

_PROFILE_VIEWS_TABLE = """
CREATE TABLE IF NOT EXISTS profile_views (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    nanny_id      INTEGER NOT NULL,
    visitor_kind  TEXT    NOT NULL CHECK (visitor_kind IN ('nanny', 'family')),
    visitor_id    INTEGER NOT NULL,
    created_at    TEXT    NOT NULL,
    UNIQUE(nanny_id, visitor_kind, visitor_id)
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    for ddl in (
        _SUBSCRIPTIONS_TABLE,
        _JOBS_TABLE,
        _CONVERSATIONS_TABLE,
        _MESSAGES_TABLE,
        _BOOSTS_TABLE,
        _PROFILE_VIEWS_TABLE,
    ):
        conn.execute(ddl)
    conn.commit()
    return conn


def _lookup_column(lookup: NannyLookup | FamilyLookup) -> tuple[str, int]:
    if isinstance(lookup, NannyLookup):
        return "nanny_id", lookup.id
    return "family_id", lookup.id


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


def save_subscription(conn: sqlite3.Connection, subscription: SubscriptionSnapshot) -> None:
    """Store the subscription, replacing any previous row for the same owner."""
    column, owner_id = _lookup_column(subscription.lookup)
    conn.execute(f"DELETE FROM subscriptions WHERE {column} = ?", (owner_id,))
    conn.execute(
        f"""
        INSERT INTO subscriptions
            ({column}, plan, status, current_period_start, current_period_end)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            owner_id,
            subscription.plan.value,
            subscription.status.value,
            subscription.current_period_start.isoformat(),
            subscription.current_period_end.isoformat(),
        ),
    )
    conn.commit()


def get_subscription(
    conn: sqlite3.Connection,
    lookup: NannyLookup | FamilyLookup,
) -> SubscriptionSnapshot | None:
    """Return the owner's subscription, or None if it has never subscribed.

    Raises:
        UnknownPlanError: If the stored plan is outside the known set.
    """
    column, owner_id = _lookup_column(lookup)
    row = conn.execute(
        f"""
        SELECT plan, status, current_period_start, current_period_end
        FROM subscriptions WHERE {column} = ?
        """,
        (owner_id,),
    ).fetchone()
    if row is None:
        return None
    return SubscriptionSnapshot(
        lookup=lookup,
        plan=parse_plan(row["plan"]),
        status=SubscriptionStatus(row["status"]),
        current_period_start=datetime.fromisoformat(row["current_period_start"]),
        current_period_end=datetime.fromisoformat(row["current_period_end"]),
    )


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def insert_job(
    conn: sqlite3.Connection,
    family_id: int,
    created_at: datetime | None = None,
    status: str = "ACTIVE",
) -> int:
    """Insert a job. Returns the new job ID."""
    cursor = conn.execute(
        "INSERT INTO jobs (family_id, status, created_at) VALUES (?, ?, ?)",
        (family_id, status, (created_at or datetime.now()).isoformat()),
    )
    conn.commit()
    return cursor.lastrowid or 0


def get_job(conn: sqlite3.Connection, job_id: int) -> JobSnapshot | None:
    """Return the job with its owner's active plan (None when the owner is inactive)."""
    row = conn.execute(
        """
        SELECT j.id, j.family_id, j.created_at, s.plan, s.status
        FROM jobs j
        LEFT JOIN subscriptions s ON s.family_id = j.family_id
        WHERE j.id = ?
        """,
        (job_id,),
    ).fetchone()
    if row is None:
        return None
    family_plan: SubscriptionPlan | None = None
    if row["plan"] is not None and SubscriptionStatus(row["status"]) in ACTIVE_STATUSES:
        family_plan = parse_plan(row["plan"])
    return JobSnapshot(
        id=row["id"],
        family_id=row["family_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        family_plan=family_plan,
    )


def count_active_jobs(conn: sqlite3.Connection, family_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM jobs WHERE family_id = ? AND status = 'ACTIVE'",
        (family_id,),
    ).fetchone()
    return int(row[0])


# ---------------------------------------------------------------------------
# Conversations and messages
# ---------------------------------------------------------------------------


def insert_conversation(
    conn: sqlite3.Connection,
    conversation_id: str,
    family_id: int,
    nanny_id: int,
    job_id: int | None = None,
    created_at: datetime | None = None,
) -> None:
    conn.execute(
        """
        INSERT INTO conversations (id, job_id, family_id, nanny_id, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (conversation_id, job_id, family_id, nanny_id, (created_at or datetime.now()).isoformat()),
    )
    conn.commit()


def count_job_conversations(conn: sqlite3.Connection, job_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM conversations WHERE job_id = ?",
        (job_id,),
    ).fetchone()
    return int(row[0])


def conversation_exists(
    conn: sqlite3.Connection,
    family_id: int,
    nanny_id: int,
    job_id: int,
) -> bool:
    """Check whether this family and nanny already talk about this job."""
    row = conn.execute(
        """
        SELECT 1 FROM conversations
        WHERE family_id = ? AND nanny_id = ? AND job_id = ?
        LIMIT 1
        """,
        (family_id, nanny_id, job_id),
    ).fetchone()
    return row is not None


def insert_message(
    conn: sqlite3.Connection,
    conversation_id: str,
    *,
    sender_nanny_id: int | None = None,
    sender_family_id: int | None = None,
    body: str = "",
    created_at: datetime | None = None,
) -> int:
    """Append a message to a conversation. Returns its sequence number."""
    if (sender_nanny_id is None) == (sender_family_id is None):
        msg = "a message needs exactly one sender (nanny or family)"
        raise ValueError(msg)
    row = conn.execute(
        "SELECT COALESCE(MAX(seq), 0) FROM messages WHERE conversation_id = ?",
        (conversation_id,),
    ).fetchone()
    seq = int(row[0]) + 1
    conn.execute(
        """
        INSERT INTO messages
            (conversation_id, seq, sender_nanny_id, sender_family_id, body, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            conversation_id,
            seq,
            sender_nanny_id,
            sender_family_id,
            body,
            (created_at or datetime.now()).isoformat(),
        ),
    )
    conn.commit()
    return seq


def get_conversation_thread(
    conn: sqlite3.Connection,
    conversation_id: str,
    nanny_id: int,
) -> ConversationThread:
    """Summarize a conversation for the nanny messaging gate. Deleted messages are ignored."""
    row = conn.execute(
        """
        SELECT COUNT(*) AS total, MAX(seq) AS last_seq
        FROM messages
        WHERE conversation_id = ? AND sender_nanny_id = ? AND deleted_at IS NULL
        """,
        (conversation_id, nanny_id),
    ).fetchone()
    nanny_message_count = int(row["total"])
    if nanny_message_count == 0:
        return ConversationThread()

    first = conn.execute(
        """
        SELECT sender_family_id FROM messages
        WHERE conversation_id = ? AND deleted_at IS NULL
        ORDER BY seq ASC LIMIT 1
        """,
        (conversation_id,),
    ).fetchone()
    family_started = first is not None and first["sender_family_id"] is not None

    responses = conn.execute(
        """
        SELECT COUNT(*) FROM messages
        WHERE conversation_id = ? AND sender_family_id IS NOT NULL
          AND seq > ? AND deleted_at IS NULL
        """,
        (conversation_id, row["last_seq"]),
    ).fetchone()

    return ConversationThread(
        nanny_message_count=nanny_message_count,
        family_response_count=int(responses[0]),
        family_started=family_started,
    )


# ---------------------------------------------------------------------------
# Boosts
# ---------------------------------------------------------------------------


def insert_boost(
    conn: sqlite3.Connection,
    boost_type: str,
    *,
    job_id: int | None = None,
    nanny_id: int | None = None,
    created_at: datetime | None = None,
) -> int:
    """Record a boost (type JOB or NANNY_PROFILE). Returns the row ID."""
    cursor = conn.execute(
        "INSERT INTO boosts (type, job_id, nanny_id, created_at) VALUES (?, ?, ?, ?)",
        (boost_type, job_id, nanny_id, (created_at or datetime.now()).isoformat()),
    )
    conn.commit()
    return cursor.lastrowid or 0


def count_family_boosts(
    conn: sqlite3.Connection,
    family_id: int,
    period_start: datetime,
    period_end: datetime,
) -> int:
    """Count job boosts a family created within [period_start, period_end)."""
    row = conn.execute(
        """
        SELECT COUNT(*) FROM boosts b
        JOIN jobs j ON j.id = b.job_id
        WHERE j.family_id = ? AND b.type = 'JOB'
          AND b.created_at >= ? AND b.created_at < ?
        """,
        (family_id, period_start.isoformat(), period_end.isoformat()),
    ).fetchone()
    return int(row[0])


def get_last_nanny_boost(conn: sqlite3.Connection, nanny_id: int) -> datetime | None:
    row = conn.execute(
        """
        SELECT MAX(created_at) FROM boosts
        WHERE nanny_id = ? AND type = 'NANNY_PROFILE'
        """,
        (nanny_id,),
    ).fetchone()
    if row[0] is None:
        return None
    return datetime.fromisoformat(row[0])


# ---------------------------------------------------------------------------
# Profile views
# ---------------------------------------------------------------------------


def insert_profile_view(
    conn: sqlite3.Connection,
    visitor: NannyLookup | FamilyLookup,
    nanny_id: int,
    created_at: datetime | None = None,
) -> bool:
    """Record that ``visitor`` opened a nanny profile.

    Returns False when the view was already recorded.
    """
    cursor = conn.execute(
        """
        INSERT OR IGNORE INTO profile_views (nanny_id, visitor_kind, visitor_id, created_at)
        VALUES (?, ?, ?, ?)
        """,
        (nanny_id, visitor.kind, visitor.id, (created_at or datetime.now()).isoformat()),
    )
    conn.commit()
    return cursor.rowcount > 0


def count_profile_views(conn: sqlite3.Connection, visitor: NannyLookup | FamilyLookup) -> int:
    """Count distinct nanny profiles the visitor has opened."""
    row = conn.execute(
        "SELECT COUNT(*) FROM profile_views WHERE visitor_kind = ? AND visitor_id = ?",
        (visitor.kind, visitor.id),
    ).fetchone()
    return int(row[0])


def profile_view_exists(
    conn: sqlite3.Connection,
    visitor: NannyLookup | FamilyLookup,
    nanny_id: int,
) -> bool:
    row = conn.execute(
        """
        SELECT 1 FROM profile_views
        WHERE nanny_id = ? AND visitor_kind = ? AND visitor_id = ?
        LIMIT 1
        """,
        (nanny_id, visitor.kind, visitor.id),
    ).fetchone()
    return row is not None
