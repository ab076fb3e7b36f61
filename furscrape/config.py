"""Configuration objects and constants for the client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger("furscrape")

BASE_URL = "https://www.furaffinity.net"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/69.0.3497.100 Safari/537.36"
)
DEFAULT_RATE_LIMIT = 1.0
DEFAULT_TIMEOUT = 15.0


def parse_cookie_string(value: str) -> Dict[str, str]:
    """Parse ``name=value; other=value`` into a dict, skipping junk."""
    cookies: Dict[str, str] = {}
    for chunk in value.split(";"):
        name, sep, cookie_value = chunk.strip().partition("=")
        if not sep or not name:
            if chunk.strip():
                logger.warning("Ignoring malformed cookie %r", chunk.strip())
            continue
        cookies[name.strip()] = cookie_value.strip()
    return cookies


@dataclass
class ClientConfig:
    """Settings for a single site session."""

    proxy: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    rate_limit: float = DEFAULT_RATE_LIMIT
    cookies: Dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    base_url: str = BASE_URL

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from ``FURSCRAPE_*`` environment variables."""
        config = cls()
        proxy = os.getenv("FURSCRAPE_PROXY")
        if proxy:
            config.proxy = proxy
        user_agent = os.getenv("FURSCRAPE_USER_AGENT")
        if user_agent:
            config.user_agent = user_agent
        rate_limit = os.getenv("FURSCRAPE_RATE_LIMIT")
        if rate_limit:
            try:
                config.rate_limit = float(rate_limit)
            except ValueError:
                logger.warning(
                    "FURSCRAPE_RATE_LIMIT is set to %r which is not a number; using %s",
                    rate_limit,
                    config.rate_limit,
                )
        cookies = os.getenv("FURSCRAPE_COOKIES")
        if cookies:
            config.cookies = parse_cookie_string(cookies)
        return config
