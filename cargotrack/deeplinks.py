"""
Deep links - build and parse app URLs

    rastreamento://order/{uuid}
    rastreamento://add?code=...
    rastreamento://settings
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .constants import DEEP_LINK_SCHEME

logger = logging.getLogger(__name__)


class DeepLinkKind(str, Enum):
    OPEN_ORDER = "open_order"
    ADD_ORDER = "add_order"
    SETTINGS = "settings"


@dataclass(frozen=True)
class DeepLinkAction:
    kind: DeepLinkKind
    order_id: Optional[uuid.UUID] = None
    tracking_code: Optional[str] = None


def order_url(order_id: uuid.UUID, scheme: str = DEEP_LINK_SCHEME) -> str:
    return f"{scheme}://order/{str(order_id).upper()}"


def add_order_url(tracking_code: Optional[str] = None, scheme: str = DEEP_LINK_SCHEME) -> str:
    if tracking_code:
        return f"{scheme}://add?{urlencode({'code': tracking_code})}"
    return f"{scheme}://add"


def settings_url(scheme: str = DEEP_LINK_SCHEME) -> str:
    return f"{scheme}://settings"


def parse_deep_link(url: str, scheme: str = DEEP_LINK_SCHEME) -> Optional[DeepLinkAction]:
    """
    Parse an app URL into an action.

    Args:
        url: URL received by the app
        scheme: Expected URL scheme

    Returns:
        DeepLinkAction, or None for foreign schemes, unknown hosts and bad ids
    """
    parsed = urlparse(url)
    if parsed.scheme != scheme:
        return None

    host = parsed.netloc
    if host == "order":
        segments = [s for s in parsed.path.split("/") if s]
        if not segments:
            logger.warning(f"Order deep link without id: {url}")
            return None
        try:
            order_id = uuid.UUID(segments[0])
        except ValueError:
            logger.warning(f"Invalid order id in deep link: {url}")
            return None
        return DeepLinkAction(DeepLinkKind.OPEN_ORDER, order_id=order_id)

    if host == "add":
        codes = parse_qs(parsed.query).get("code")
        return DeepLinkAction(DeepLinkKind.ADD_ORDER, tracking_code=codes[0] if codes else None)

    if host == "settings":
        return DeepLinkAction(DeepLinkKind.SETTINGS)

    logger.warning(f"Unrecognized deep link: {url}")
    return None
