"""Supabase client for the document store backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return client
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Expected schema (one table per collection: leads, washers, expenses):
#
#   create table leads (
#       id text primary key,
#       version integer not null,
#       span_start timestamptz,
#       span_end timestamptz,
#       document jsonb not null
#   );
#
#   create table counters (name text primary key, sequence_value bigint not null default 0);
#
#   create function next_sequence(sequence_name text) returns bigint as $$
#       insert into counters (name, sequence_value) values (sequence_name, 1)
#       on conflict (name) do update set sequence_value = counters.sequence_value + 1
#       returning sequence_value;
#   $$ language sql;
