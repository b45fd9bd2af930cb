"""
Status/result store.

Passes stage outputs and progress between otherwise stateless stage
invocations. Keys are scoped by job id (and step for results) and every key
carries a TTL as a safety net against orphaned jobs.

Key layout:
    {prefix}:status:{job_id}
    {prefix}:result:{job_id}:{step}

Dependencies: redis.asyncio, pydantic
System role: Transient inter-stage state
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from thesis_review.configs.cache import CacheSettings
from thesis_review.core.exceptions import StoreError
from thesis_review.core.pipeline.stages import STAGE_DEFINITIONS
from thesis_review.models.job import JobState, JobStatus

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RESULT_STEPS = tuple(sorted(definition.result_step for definition in STAGE_DEFINITIONS.values()))


class StatusStore(ABC):
    """Contract for the job status and step result store."""

    @abstractmethod
    async def set_status(self, job_id: str, status: JobStatus) -> bool:
        """
        Overwrite the job's status record.

        A failed status is terminal: writing anything other than another
        failure over it is refused.

        Returns:
            bool: False if the write was refused
        """

    @abstractmethod
    async def get_status(self, job_id: str) -> JobStatus | None:
        """Current status record, or None."""

    @abstractmethod
    async def set_result(self, job_id: str, step: int, value: BaseModel) -> None:
        """Store a step result (idempotent overwrite)."""

    @abstractmethod
    async def get_result(self, job_id: str, step: int, model: type[ModelT]) -> ModelT | None:
        """Load a step result as ``model``, or None if absent."""

    @abstractmethod
    async def cleanup(self, job_id: str) -> int:
        """Delete every key of the job; returns the number of keys removed."""

    async def ping(self) -> bool:
        """Whether the backing store answers."""
        return True

    async def close(self) -> None:
        """Release connections."""


class RedisStatusStore(StatusStore):
    """Redis-backed store using ``redis.asyncio``."""

    def __init__(self, settings: CacheSettings, client: aioredis.Redis | None = None) -> None:
        self._prefix = settings.key_prefix
        self._ttl = settings.ttl_seconds
        self._client = client or aioredis.from_url(
            settings.url,
            decode_responses=True,
            socket_timeout=settings.socket_timeout_seconds,
        )

    def status_key(self, job_id: str) -> str:
        return f"{self._prefix}:status:{job_id}"

    def result_key(self, job_id: str, step: int) -> str:
        return f"{self._prefix}:result:{job_id}:{step}"

    async def set_status(self, job_id: str, status: JobStatus) -> bool:
        try:
            if status.status != JobState.FAILED:
                current = await self._client.get(self.status_key(job_id))
                if current and JobStatus.model_validate_json(current).is_terminal_failure:
                    logger.warning(
                        "set_status - Refusing to overwrite failed status",
                        extra={"job_id": job_id, "requested": status.status.value},
                    )
                    return False
            await self._client.set(
                self.status_key(job_id),
                status.model_dump_json(),
                ex=self._ttl,
            )
            return True
        except RedisError as e:
            raise StoreError(f"Failed to write status: {e}", operation="set_status") from e

    async def get_status(self, job_id: str) -> JobStatus | None:
        try:
            raw = await self._client.get(self.status_key(job_id))
        except RedisError as e:
            raise StoreError(f"Failed to read status: {e}", operation="get_status") from e
        if raw is None:
            return None
        try:
            return JobStatus.model_validate_json(raw)
        except ValidationError as e:
            logger.error(
                "get_status - Corrupt status record",
                extra={"job_id": job_id, "error": str(e)},
            )
            return None

    async def set_result(self, job_id: str, step: int, value: BaseModel) -> None:
        try:
            await self._client.set(
                self.result_key(job_id, step),
                value.model_dump_json(),
                ex=self._ttl,
            )
        except RedisError as e:
            raise StoreError(f"Failed to write step {step} result: {e}", operation="set_result") from e

        logger.debug("set_result - Stored step result", extra={"job_id": job_id, "step": step})

    async def get_result(self, job_id: str, step: int, model: type[ModelT]) -> ModelT | None:
        try:
            raw = await self._client.get(self.result_key(job_id, step))
        except RedisError as e:
            raise StoreError(f"Failed to read step {step} result: {e}", operation="get_result") from e
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            # An unreadable result is treated like a missing one.
            logger.error(
                "get_result - Corrupt step result",
                extra={"job_id": job_id, "step": step, "error": str(e)},
            )
            return None

    async def cleanup(self, job_id: str) -> int:
        keys = [self.status_key(job_id)] + [self.result_key(job_id, step) for step in RESULT_STEPS]
        try:
            deleted = await self._client.delete(*keys)
        except RedisError as e:
            raise StoreError(f"Failed to clean up job keys: {e}", operation="cleanup") from e

        logger.info("cleanup - Removed job keys", extra={"job_id": job_id, "deleted": deleted})
        return deleted

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("ping - Redis unreachable", extra={"error_msg": str(e)})
            return False

    async def close(self) -> None:
        await self._client.aclose()
