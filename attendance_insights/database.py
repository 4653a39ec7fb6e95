"""
Database operations for Supabase.

Handles client initialization and the table operations used by saved
filter sets.
"""

import logging
from typing import Any, Dict, List

import pandas as pd
from supabase import Client, create_client

from attendance_insights.config import Config

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """
    Initialize and return a Supabase client.

    Returns:
        Client: Initialized Supabase client

    Raises:
        ValueError: If configuration is invalid
    """
    Config.validate()

    client = create_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_ROLE_KEY)
    logger.info("Supabase client initialized successfully")
    return client


def query_table_to_dataframe(client: Client, table_name: str, columns: str = "*") -> pd.DataFrame:
    """
    Query a Supabase table and return as pandas DataFrame.

    Args:
        client: Supabase client
        table_name: Name of the table to query
        columns: Column names to select (default: "*" for all)

    Returns:
        DataFrame containing table data
    """
    try:
        response = client.table(table_name).select(columns).execute()
        df = pd.DataFrame(response.data)
        logger.info(f"Retrieved {len(df)} rows from {table_name}")
        return df
    except Exception as e:
        logger.error(f"Error querying table {table_name}: {e}")
        raise


def select_rows(client: Client, table_name: str, column: str, value: Any) -> List[Dict[str, Any]]:
    """
    Select rows where ``column`` equals ``value``.

    Returns:
        List of row dictionaries (empty when nothing matches)
    """
    try:
        response = client.table(table_name).select("*").eq(column, value).execute()
        return list(response.data or [])
    except Exception as e:
        logger.error(f"Error selecting from {table_name}: {e}")
        raise


def upsert_records(client: Client, table_name: str, records: List[Dict[str, Any]], on_conflict: str) -> None:
    """
    Upsert records into a table (idempotent on the conflict columns).

    Args:
        client: Supabase client
        table_name: Target table
        records: Row dictionaries
        on_conflict: Comma-separated unique constraint columns
    """
    try:
        client.table(table_name).upsert(records, on_conflict=on_conflict).execute()
        logger.info(f"Successfully upserted {len(records)} records into {table_name}")
    except Exception as e:
        logger.error(f"Error upserting into {table_name}: {e}")
        raise


def delete_rows(client: Client, table_name: str, column: str, value: Any) -> None:
    try:
        client.table(table_name).delete().eq(column, value).execute()
        logger.info(f"Deleted rows from {table_name} where {column}={value!r}")
    except Exception as e:
        logger.error(f"Error deleting from {table_name}: {e}")
        raise
