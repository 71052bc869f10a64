"""
Security utilities for the YourTyme backend.
Verifies that inbound webhook requests were signed by Slack.
"""

import hmac
import time
from typing import Callable, Mapping, Optional, Union

from slack_sdk.signature import SignatureVerifier

from yourtyme.core.config import settings
from yourtyme.core.exceptions import InvalidSignatureError
from yourtyme.core.logging import get_logger

logger = get_logger(__name__)

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"


class SlackRequestVerifier:
    """Checks `v0:{timestamp}:{raw body}` HMAC-SHA256 signatures."""

    def __init__(
        self,
        signing_secret: Optional[str] = None,
        max_age_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.signing_secret = signing_secret or settings.SLACK_SIGNING_SECRET
        self.max_age_seconds = (
            max_age_seconds
            if max_age_seconds is not None
            else settings.SLACK_REQUEST_MAX_AGE_SECONDS
        )
        self.clock = clock

    def verify(self, body: Union[bytes, str], headers: Mapping[str, str]) -> None:
        """
        Verify a Slack request.

        Args:
            body: Raw request body exactly as received
            headers: Request headers

        Raises:
            InvalidSignatureError: If a header is missing, the timestamp is
                stale, or the signature does not match the body
        """
        if not self.signing_secret:
            raise InvalidSignatureError("Slack signing secret is not configured")

        timestamp = headers.get(TIMESTAMP_HEADER)
        signature = headers.get(SIGNATURE_HEADER)
        if not timestamp or not signature:
            raise InvalidSignatureError("Missing Slack signature headers")

        try:
            skew = abs(self.clock() - int(timestamp))
        except ValueError:
            raise InvalidSignatureError("Malformed Slack request timestamp")
        if skew > self.max_age_seconds:
            logger.warning(f"Rejected Slack request with timestamp skew {skew:.0f}s")
            raise InvalidSignatureError(
                "Slack request timestamp is too old", details={"skew": int(skew)}
            )

        verifier = SignatureVerifier(self.signing_secret)
        expected = verifier.generate_signature(timestamp=timestamp, body=body)
        if expected is None or not _constant_time_equals(expected, signature):
            logger.warning("Rejected Slack request with mismatched signature")
            raise InvalidSignatureError()


def _constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
