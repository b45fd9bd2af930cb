"""Job queue client and inbound signature verification."""

from thesis_review.boundary.queue.base import JobQueue
from thesis_review.boundary.queue.qstash import QStashQueue
from thesis_review.boundary.queue.signature import (
    SIGNATURE_HEADER,
    SignatureVerifier,
    body_digest,
)

__all__ = ["JobQueue", "QStashQueue", "SIGNATURE_HEADER", "SignatureVerifier", "body_digest"]
