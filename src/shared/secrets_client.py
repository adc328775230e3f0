"""
Secrets Manager client for the ESL exercises progress service
Handles encrypted credential retrieval using AWS Secrets Manager + KMS
"""
import json
import os
import boto3
from botocore.exceptions import ClientError
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)


class SecretsManagerClient:
    """Client for accessing encrypted secrets via AWS Secrets Manager"""

    def __init__(self, region: str = None, endpoint_url: str = None):
        """
        Initialize Secrets Manager client

        Args:
            region: AWS region (defaults to environment variable)
            endpoint_url: Custom endpoint for LocalStack (optional)
        """
        self.region = region or os.getenv('AWS_DEFAULT_REGION', 'us-east-1')
        self.endpoint_url = endpoint_url or os.getenv('AWS_ENDPOINT_URL')

        client_config = {
            'region_name': self.region
        }

        if self.endpoint_url:
            client_config['endpoint_url'] = self.endpoint_url
            logger.info(f"Using LocalStack endpoint: {self.endpoint_url}")

        self.client = boto3.client('secretsmanager', **client_config)
        self._cache = {}

    def get_secret(self, secret_name: str, use_cache: bool = True) -> Dict[str, Any]:
        """
        Retrieve and decrypt a secret from Secrets Manager

        Args:
            secret_name: Name/ARN of the secret
            use_cache: Whether to use cached values (default: True)

        Returns:
            Dictionary containing the secret data

        Raises:
            ClientError: If secret cannot be retrieved
            ValueError: If secret is not valid JSON
        """
        if use_cache and secret_name in self._cache:
            logger.debug(f"Using cached secret: {secret_name}")
            return self._cache[secret_name]

        try:
            logger.info(f"Retrieving secret: {secret_name}")
            response = self.client.get_secret_value(SecretId=secret_name)
            secret_data = json.loads(response['SecretString'])

            if use_cache:
                self._cache[secret_name] = secret_data

            return secret_data

        except ClientError as e:
            error_code = e.response['Error']['Code']

            if error_code == 'DecryptionFailureException':
                logger.error(f"KMS decryption failed for secret: {secret_name}")
            elif error_code == 'ResourceNotFoundException':
                logger.error(f"Secret not found: {secret_name}")
            else:
                logger.error(f"Unexpected error retrieving secret {secret_name}: {e}")
            raise

        except json.JSONDecodeError as e:
            logger.error(f"Secret {secret_name} is not valid JSON: {e}")
            raise ValueError(f"Secret {secret_name} contains invalid JSON")

    def get_database_credentials(self, environment: str = None) -> Dict[str, Any]:
        """
        Get database credentials for the specified environment

        Args:
            environment: Environment name (defaults to ENVIRONMENT env var)

        Returns:
            Dictionary with database connection parameters
        """
        secret_name = os.getenv('DB_SECRET_NAME')
        if not secret_name:
            env = environment or os.getenv('ENVIRONMENT', 'local')
            secret_name = 'esl-progress/database'
            if env != 'local':
                secret_name = f'esl-progress/{env}/database'

        return self.get_secret(secret_name)

    def clear_cache(self):
        """Clear the secrets cache"""
        self._cache.clear()
        logger.info("Secrets cache cleared")


def get_database_credentials() -> Dict[str, Any]:
    """Convenience function to get database credentials"""
    endpoint_url = os.getenv('LOCALSTACK_ENDPOINT')
    client = SecretsManagerClient(endpoint_url=endpoint_url)
    return client.get_database_credentials()
