from __future__ import annotations

import logging

from pyngrok import ngrok
from pyngrok.exception import PyngrokError

logger = logging.getLogger(__name__)


def start_tunnel(port: int, authtoken: str = "") -> str | None:
    """Expose the local server through ngrok for webhook development.

    Returns the public URL, or ``None`` when the tunnel could not be opened; the
    server keeps running either way.
    """
    try:
        if authtoken:
            ngrok.set_auth_token(authtoken)
        tunnel = ngrok.connect(port, "http")
    except PyngrokError:
        logger.error("Could not start ngrok tunnel", exc_info=True)
        return None

    public_url = tunnel.public_url
    logger.info("Public webhook URL: %s/callback", public_url)
    logger.info("Set this URL as the Webhook URL in the LINE Developers console")
    return public_url


def stop_tunnel(public_url: str) -> None:
    try:
        ngrok.disconnect(public_url)
    except PyngrokError:
        logger.warning("Could not close ngrok tunnel %s", public_url, exc_info=True)
