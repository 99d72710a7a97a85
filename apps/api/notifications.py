from __future__ import annotations

import hmac
import logging
from typing import Callable

from .errors import Unauthorized

logger = logging.getLogger(__name__)

CHANGE_ACKNOWLEDGEMENT = 'File change processed'


def _log_diff(diff: str) -> None:
    logger.info('File changed: %s', diff)


def bearer_matches(authorization: str | None, secret: str) -> bool:
    # An unconfigured secret never authorizes anything.
    if not secret:
        return False
    return hmac.compare_digest((authorization or '').encode('utf-8'), f'Bearer {secret}'.encode('utf-8'))


def record_change_notification(
    diff: str,
    is_authorized: bool,
    recorder: Callable[[str], None] | None = None
) -> str:
    if not is_authorized:
        raise Unauthorized()
    (recorder or _log_diff)(diff)
    return CHANGE_ACKNOWLEDGEMENT
