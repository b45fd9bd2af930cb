"""
Document source and text extraction.

Fetching the uploaded file and turning it into text are external
collaborators of the pipeline; this module defines their contracts, an
S3-backed source and the built-in plain-text extractor.

Dependencies: boto3
System role: Input adapters for the extract stage
"""

import logging
from abc import ABC, abstractmethod
from pathlib import PurePosixPath

import boto3
from botocore.exceptions import ClientError
from fastapi.concurrency import run_in_threadpool

from thesis_review.configs.storage import StorageSettings
from thesis_review.core.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)


def file_extension(file_name: str) -> str:
    """Lower-case extension without the dot ("" if none)."""
    return PurePosixPath(file_name).suffix.lower().lstrip(".")


class DocumentSource(ABC):
    """Reads the raw bytes of an uploaded document."""

    @abstractmethod
    async def fetch(self, file_ref: str) -> bytes:
        """
        Download a document.

        Raises:
            DocumentNotFoundError: No object exists under ``file_ref``
        """


class S3DocumentSource(DocumentSource):
    """Downloads uploads from the documents bucket."""

    def __init__(self, settings: StorageSettings, s3_client=None) -> None:
        self._bucket = settings.documents_bucket
        self._s3_client = s3_client or boto3.client("s3", region_name=settings.region)

    async def fetch(self, file_ref: str) -> bytes:
        try:
            response = await run_in_threadpool(
                self._s3_client.get_object, Bucket=self._bucket, Key=file_ref
            )
            return await run_in_threadpool(response["Body"].read)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise DocumentNotFoundError(file_ref, details={"bucket": self._bucket}) from e
            raise


class TextExtractor(ABC):
    """Turns document bytes into plain text."""

    @abstractmethod
    def supports(self, file_name: str) -> bool:
        """Whether this extractor handles the file's format."""

    @abstractmethod
    def extract(self, data: bytes, file_name: str) -> str:
        """Extract the full text of a document."""


class PlainTextExtractor(TextExtractor):
    """UTF-8 text and markdown files, with a cp1254 fallback for Turkish text."""

    EXTENSIONS = frozenset({"txt", "md", "text"})

    def supports(self, file_name: str) -> bool:
        return file_extension(file_name) in self.EXTENSIONS

    def extract(self, data: bytes, file_name: str) -> str:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.info(
                "extract - Falling back to cp1254 decoding",
                extra={"file_name": file_name},
            )
            return data.decode("cp1254", errors="replace")
