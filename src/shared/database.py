"""
Database connection pooling and management for PostgreSQL
Credentials come from AWS Secrets Manager with an environment fallback
"""
import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any

from psycopg_pool import ConnectionPool

from shared.config import get_config

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages database connections with connection pooling for Lambda functions"""

    def __init__(self):
        self.connection_pool: Optional[ConnectionPool] = None
        self.db_config: Optional[Dict[str, str]] = None

    def _get_db_config(self) -> Dict[str, str]:
        if self.db_config is None:
            self.db_config = get_config().get_database_config()
            logger.info(
                f"Database config loaded: {self.db_config['host']}:{self.db_config['port']}/{self.db_config['database']}"
            )
        return self.db_config

    def _create_connection_pool(self):
        """Create connection pool for database connections"""
        if self.connection_pool is None:
            config = self._get_db_config()

            try:
                conninfo = (
                    f"host={config['host']} "
                    f"port={config['port']} "
                    f"dbname={config['database']} "
                    f"user={config['user']} "
                    f"password={config['password']} "
                    f"connect_timeout=10 "
                    f"application_name=esl-progress-lambda"
                )

                self.connection_pool = ConnectionPool(
                    conninfo=conninfo,
                    min_size=1,
                    max_size=5,  # Limit connections for Lambda
                    open=True
                )
                logger.info("Database connection pool created successfully")

            except Exception as e:
                logger.error(f"Failed to create connection pool: {e}")
                raise

    @contextmanager
    def get_connection(self):
        """Get a database connection from the pool"""
        if self.connection_pool is None:
            self._create_connection_pool()

        with self.connection_pool.connection() as connection:
            yield connection

    @contextmanager
    def get_cursor(self):
        """Get a database cursor with automatic commit/rollback"""
        with self.get_connection() as connection:
            cursor = connection.cursor()
            try:
                yield cursor
                connection.commit()
            except Exception:
                connection.rollback()
                raise
            finally:
                cursor.close()


# Global database manager instance
db_manager = DatabaseManager()


def get_db_cursor():
    """Get database cursor context manager"""
    return db_manager.get_cursor()


def execute_query(query: str, params: tuple = None) -> Any:
    """Execute a query and return all rows, or the row count for plain writes"""
    with get_db_cursor() as cursor:
        cursor.execute(query, params)
        if cursor.description is not None:
            return cursor.fetchall()
        return cursor.rowcount


def execute_query_one(query: str, params: tuple = None) -> Any:
    """Execute a query and return a single row"""
    with get_db_cursor() as cursor:
        cursor.execute(query, params)
        if cursor.description is not None:
            return cursor.fetchone()
        return cursor.rowcount


def health_check() -> bool:
    """Check database connectivity"""
    try:
        with get_db_cursor() as cursor:
            cursor.execute("SELECT 1")
            result = cursor.fetchone()
            return result[0] == 1
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
