"""
Lambda function that checks every changelog once.
Triggered by an EventBridge schedule (every 10 minutes); fingerprints live in
the backend named by STORAGE_BACKEND, normally DynamoDB.
"""

import json
import logging
from typing import Any, Dict

from config import Config
from sentinel import run_once
from storage import build_storage

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Run one check cycle.

    Returns 500 without checking anything when the configuration is invalid
    or Telegram credentials are missing.
    """
    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return {
            'statusCode': 500,
            'body': json.dumps({'message': str(e)})
        }

    missing = config.missing()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        return {
            'statusCode': 500,
            'body': json.dumps({'message': 'Missing configuration', 'missing': missing})
        }

    notified = run_once(config, storage=build_storage(config))

    return {
        'statusCode': 200,
        'body': json.dumps({'notified': notified})
    }
