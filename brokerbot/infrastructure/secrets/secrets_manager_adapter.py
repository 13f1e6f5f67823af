"""
Infrastructure adapter: AWS Secrets Manager → ISecretStore.

load_into_env() is called once at startup, before Settings.from_env(), when
the API tokens are not already present in the environment.
"""

import json
import os

import boto3

from brokerbot.domain.ports.secret_store_port import ISecretStore


class SecretsManagerAdapter(ISecretStore):
    """Fetches and deserializes secrets from AWS Secrets Manager."""

    def __init__(self, region: str | None = None, client=None) -> None:
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    def get_secret(self, secret_id: str) -> dict:
        """Fetch and deserialize a JSON secret by ARN or name."""
        response = self._client.get_secret_value(SecretId=secret_id)
        return json.loads(response["SecretString"])

    def load_into_env(self, secret_id: str, overwrite: bool = False) -> list[str]:
        """Inject the key-value pairs of a JSON secret into os.environ.

        Values already set in the environment win unless *overwrite* is True.
        Returns the keys that were written.
        """
        written = []
        for key, value in self.get_secret(secret_id).items():
            if overwrite or not os.environ.get(key):
                os.environ[key] = str(value)
                written.append(key)
        return written
