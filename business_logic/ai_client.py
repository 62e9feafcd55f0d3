"""
OpenAI client construction, memoized per credential.

Clients are plain values keyed by API key, so rotating the credential
simply yields a different client instead of mutating shared state.
"""

import logging
from typing import Dict

from openai import OpenAI

logger = logging.getLogger(__name__)

_clients: Dict[str, OpenAI] = {}


def get_client(api_key: str) -> OpenAI:
    """Return the OpenAI client for ``api_key``, creating it on first use."""
    client = _clients.get(api_key)
    if client is None:
        client = OpenAI(api_key=api_key)
        _clients[api_key] = client
        logger.info("OpenAI client initialized")
    return client


def clear_clients():
    """Forget every cached client."""
    _clients.clear()
