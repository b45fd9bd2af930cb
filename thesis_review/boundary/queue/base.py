"""
Job queue contract.

Dependencies: thesis_review.models
System role: Message-passing abstraction between stages
"""

from abc import ABC, abstractmethod

from thesis_review.models.job import Job


class JobQueue(ABC):
    """At-least-once delivery of a Job to a stage endpoint."""

    @abstractmethod
    async def enqueue(
        self,
        path: str,
        job: Job,
        deduplication_id: str | None = None,
        timeout_seconds: int | None = None,
    ) -> str:
        """
        Publish a job to a stage endpoint.

        Args:
            path: Stage route relative to the API prefix
            job: Job payload for the receiving stage
            deduplication_id: Broker-side dedup key for re-published hops
            timeout_seconds: How long the broker waits for the stage to answer
                before the delivery counts as failed and is retried

        Returns:
            str: Broker message ID

        Raises:
            QueueUnavailableError: The broker did not accept the message
        """

    async def close(self) -> None:
        """Release connections."""
