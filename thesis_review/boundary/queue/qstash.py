"""
QStash job queue client.

Publishes Job payloads to stage URLs through the Upstash QStash HTTP API
with a per-message retry count, delivery timeout and completion/failure
callbacks.

Dependencies: httpx
System role: Outbound queue adapter
"""

import logging

import httpx

from thesis_review.boundary.queue.base import JobQueue
from thesis_review.configs.queue import QueueSettings
from thesis_review.core.exceptions import QueueUnavailableError
from thesis_review.models.job import Job

logger = logging.getLogger(__name__)


class QStashQueue(JobQueue):
    """
    QStash publisher.

    Usage:
        queue = QStashQueue(settings.queue)
        message_id = await queue.enqueue("/jobs/extract-text", job)
    """

    def __init__(
        self,
        settings: QueueSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = http_client or httpx.AsyncClient(timeout=settings.request_timeout_seconds)

    def _headers(self, deduplication_id: str | None, timeout_seconds: int | None) -> dict[str, str]:
        settings = self._settings
        headers = {
            "Authorization": f"Bearer {settings.token}",
            "Content-Type": "application/json",
            "Upstash-Retries": str(settings.retries),
            "Upstash-Callback": settings.endpoint_url(settings.callback_path),
            "Upstash-Failure-Callback": settings.endpoint_url(settings.failure_callback_path),
        }
        if deduplication_id:
            headers["Upstash-Deduplication-Id"] = deduplication_id
        if timeout_seconds:
            headers["Upstash-Timeout"] = f"{timeout_seconds}s"
        return headers

    async def enqueue(
        self,
        path: str,
        job: Job,
        deduplication_id: str | None = None,
        timeout_seconds: int | None = None,
    ) -> str:
        destination = self._settings.endpoint_url(path)
        publish_url = f"{self._settings.url.rstrip('/')}/v2/publish/{destination}"

        try:
            response = await self._client.post(
                publish_url,
                content=job.model_dump_json(),
                headers=self._headers(deduplication_id, timeout_seconds),
            )
            response.raise_for_status()
            message_id = response.json()["messageId"]
        except httpx.HTTPStatusError as e:
            raise QueueUnavailableError(
                f"Broker rejected message with HTTP {e.response.status_code}",
                destination=destination,
                details={"job_id": job.job_id, "response": e.response.text[:500]},
            ) from e
        except httpx.HTTPError as e:
            raise QueueUnavailableError(
                f"Broker unreachable: {type(e).__name__}: {e}",
                destination=destination,
                details={"job_id": job.job_id},
            ) from e
        except (KeyError, ValueError) as e:
            raise QueueUnavailableError(
                "Broker response did not contain a message ID",
                destination=destination,
                details={"job_id": job.job_id},
            ) from e

        logger.info(
            "enqueue - Job published",
            extra={
                "job_id": job.job_id,
                "step": job.step,
                "destination": destination,
                "message_id": message_id,
            },
        )
        return message_id

    async def close(self) -> None:
        await self._client.aclose()
