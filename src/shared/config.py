"""
Configuration management for Lambda functions
Handles environment variables and AWS Secrets Manager integration
"""
import os
import logging
from typing import Dict, Any, Optional
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shared.secrets_client import get_database_credentials

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration from environment variables and AWS Secrets Manager"""

    @property
    def environment(self) -> str:
        return os.environ.get('ENVIRONMENT', 'local')

    @property
    def region(self) -> str:
        return os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-east-1'))

    def get_database_config(self) -> Dict[str, str]:
        """Get database configuration, preferring Secrets Manager over environment"""
        try:
            credentials = get_database_credentials()
        except Exception as e:
            logger.warning(f"Failed to get credentials from Secrets Manager: {e}")
            logger.info("Falling back to environment variables")
            credentials = {}

        return {
            'host': credentials.get('host', os.environ.get('DB_HOST', 'localhost')),
            'port': str(credentials.get('port', os.environ.get('DB_PORT', '5432'))),
            'database': credentials.get('dbname', os.environ.get('DB_NAME', 'esl_progress')),
            'user': credentials.get('username', os.environ.get('DB_USER', 'esl_user')),
            'password': credentials.get('password', os.environ.get('DB_PASSWORD', ''))
        }

    def get_stats_config(self) -> Dict[str, Any]:
        """Get progress statistics configuration"""
        return {
            'timezone': os.environ.get('STATS_TIMEZONE', 'UTC'),
            'recent_activity_limit': int(os.environ.get('RECENT_ACTIVITY_LIMIT', '10')),
            'success_threshold': int(os.environ.get('SUCCESS_THRESHOLD', '60')),
            'top_exercises_limit': int(os.environ.get('TOP_EXERCISES_LIMIT', '5')),
            'activity_trend_days': int(os.environ.get('ACTIVITY_TREND_DAYS', '7')),
            'active_user_window_days': int(os.environ.get('ACTIVE_USER_WINDOW_DAYS', '30'))
        }

    def get_stats_timezone(self) -> tzinfo:
        """Zone used to turn completion timestamps into calendar days"""
        name = self.get_stats_config()['timezone']
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown STATS_TIMEZONE {name!r}, using UTC")
            return ZoneInfo('UTC')

    def get_api_config(self) -> Dict[str, Any]:
        """Get API configuration"""
        return {
            'cors_origins': os.environ.get('CORS_ORIGINS', '*').split(','),
            'max_request_size': int(os.environ.get('MAX_REQUEST_SIZE', '1048576'))  # 1MB
        }

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment.lower() in ('local', 'development')

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment.lower() == 'production'


# Global configuration manager instance
config_manager = ConfigManager()


def get_config() -> ConfigManager:
    """Get the global configuration manager"""
    return config_manager


def get_env_var(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional default and required validation"""
    value = os.environ.get(key, default)

    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set")

    return value
