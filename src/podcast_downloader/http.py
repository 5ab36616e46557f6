"""Shared HTTP session setup."""

from __future__ import annotations

import requests

DEFAULT_TIMEOUT = 30
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"


def create_session() -> requests.Session:
    """Create a session with a browser-like User-Agent.

    Some podcast hosts reject the default python-requests agent.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session
