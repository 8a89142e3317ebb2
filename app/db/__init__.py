"""
Database module - SQL connection and schema.
"""
from app.db.postgres import get_db_session, execute_raw_sql, test_database_connection
from app.db.schema import init_schema

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "test_database_connection",
    "init_schema"
]
