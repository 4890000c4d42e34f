"""Table definitions for the Supabase (Postgres) store.

PostgREST cannot run DDL, so the statements are installed once as the
``cloudbook_ensure_schema`` function (``ENSURE_SCHEMA_FUNCTION_SQL``, e.g. via
the Supabase SQL editor or a migration) and invoked over RPC at startup.
Every statement is create-if-absent, so concurrent cold starts are harmless.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from supabase import Client

logger = get_logger(__name__)

ENSURE_SCHEMA_RPC = "cloudbook_ensure_schema"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
  id SERIAL PRIMARY KEY,
  name VARCHAR(255) NOT NULL,
  email VARCHAR(255) UNIQUE NOT NULL,
  password_hash VARCHAR(255) NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS notes (
  id TEXT PRIMARY KEY,
  user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  title TEXT NOT NULL DEFAULT '',
  content TEXT NOT NULL DEFAULT '',
  folder_id TEXT NOT NULL DEFAULT 'notes',
  tags TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
  pinned BOOLEAN NOT NULL DEFAULT FALSE,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS notes_user_order_idx ON notes (user_id, pinned DESC, updated_at DESC);
"""

ENSURE_SCHEMA_FUNCTION_SQL = f"""
CREATE OR REPLACE FUNCTION {ENSURE_SCHEMA_RPC}() RETURNS void
LANGUAGE plpgsql SECURITY DEFINER AS $$
BEGIN
{SCHEMA_SQL}
END;
$$;
"""


async def ensure_schema(client: Client) -> None:
    logger.info("Ensuring database schema")
    await asyncio.to_thread(lambda: client.rpc(ENSURE_SCHEMA_RPC, params={}).execute())
