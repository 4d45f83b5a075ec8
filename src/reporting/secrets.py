import json

import boto3

from reporting.errors import ConfigurationError
from reporting.logger import get_logger

logger = get_logger("secrets")


def get_telegram_secrets(secret_name: str, region_name: str) -> dict:
    """
    Fetch Telegram credentials from AWS Secrets Manager.

    Expects the secret value to be a JSON object, e.g.:

        {
          "bot_token": "123456:ABC...",
          "chat_id": "-1001234567890"
        }
    """
    logger.info(
        "secrets.fetch",
        extra={"fields": {"secret_name": secret_name, "region": region_name}},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise ConfigurationError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError as e:
        logger.error(
            "secrets.invalid_json",
            extra={"fields": {"secret_name": secret_name, "error": str(e)}},
        )
        raise

    if not isinstance(data, dict):
        raise ConfigurationError(f"Secret '{secret_name}' must be a JSON object")

    return data
