#!/usr/bin/env python3
"""Create a local DuckDB analytics store with random sessions and events.

The schema matches the hosted store the gateway's default policy allows:
``sessions`` and ``events``.

Usage:
    python scripts/seed_analytics.py                       # ./analytics.duckdb
    python scripts/seed_analytics.py --path /tmp/a.duckdb --sessions 200

Then:
    sqlgate query "SELECT event_name, COUNT(*) FROM events GROUP BY event_name" \
        --db duckdb:path=analytics.duckdb,read_only=true
"""

from __future__ import annotations

import argparse
import json
import random
import time
import uuid
from datetime import UTC, datetime, timedelta

EVENT_TYPES = [
    "page_view",
    "button_click",
    "form_submit",
    "video_play",
    "video_pause",
    "image_view",
    "link_click",
    "search",
    "download",
    "purchase",
    "add_to_cart",
    "remove_from_cart",
    "login",
    "logout",
    "signup",
]

SCHEMA = [
    """CREATE TABLE IF NOT EXISTS sessions (
        id VARCHAR PRIMARY KEY,
        user_id VARCHAR NOT NULL,
        started_at TIMESTAMPTZ NOT NULL,
        ended_at TIMESTAMPTZ,
        duration_seconds INTEGER,
        created_at TIMESTAMPTZ NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS events (
        id VARCHAR PRIMARY KEY,
        session_id VARCHAR NOT NULL REFERENCES sessions(id),
        event_name VARCHAR NOT NULL,
        timestamp TIMESTAMPTZ NOT NULL,
        properties JSON,
        created_at TIMESTAMPTZ NOT NULL
    )""",
]


def generate(
    rng: random.Random, *, users: int, sessions: int, events: int, days_back: int
) -> tuple[list[tuple], list[tuple]]:
    """Return (session_rows, event_rows) spread over the last ``days_back`` days."""
    now = datetime.now(UTC)
    user_ids = [f"user_{i + 1}" for i in range(users)]

    session_rows: list[tuple] = []
    for _ in range(sessions):
        started = now - timedelta(seconds=rng.randint(0, days_back * 86400))
        duration = rng.randint(30, 3600)
        ended = started + timedelta(seconds=duration)
        session_rows.append(
            (str(uuid.UUID(int=rng.getrandbits(128))), rng.choice(user_ids),
             started, ended, duration, started)
        )

    event_rows: list[tuple] = []
    for _ in range(events):
        session_id, _, started, _, duration, _ = rng.choice(session_rows)
        ts = started + timedelta(seconds=rng.randint(0, duration))
        name = rng.choice(EVENT_TYPES)
        props = {"page": f"/page/{rng.randint(1, 20)}"} if name == "page_view" else None
        event_rows.append(
            (str(uuid.UUID(int=rng.getrandbits(128))), session_id, name, ts,
             json.dumps(props) if props else None, ts)
        )

    return session_rows, event_rows


def seed_store(
    path: str, *, users: int, sessions: int, events: int, days_back: int, seed: int
) -> None:
    import duckdb

    rng = random.Random(seed)
    session_rows, event_rows = generate(
        rng, users=users, sessions=sessions, events=events, days_back=days_back
    )

    print(f"Seeding {path}...")
    t0 = time.time()
    con = duckdb.connect(path)
    for ddl in SCHEMA:
        con.execute(ddl)
    con.executemany("INSERT INTO sessions VALUES (?, ?, ?, ?, ?, ?)", session_rows)
    con.executemany("INSERT INTO events VALUES (?, ?, ?, ?, ?, ?)", event_rows)
    con.close()
    print(f"  sessions: {len(session_rows)}")
    print(f"  events: {len(event_rows)}")
    print(f"  done in {time.time() - t0:.1f}s")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--path", default="analytics.duckdb")
    parser.add_argument("--users", type=int, default=15)
    parser.add_argument("--sessions", type=int, default=80)
    parser.add_argument("--events", type=int, default=800)
    parser.add_argument("--days-back", type=int, default=30)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()
    seed_store(
        args.path,
        users=args.users,
        sessions=args.sessions,
        events=args.events,
        days_back=args.days_back,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
