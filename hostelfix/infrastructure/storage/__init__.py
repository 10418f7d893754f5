"""
Blob Storage Infrastructure
===========================

HTTP client for the evidence blob store.

The store accepts a multipart upload at ``settings.blob_upload_url`` and
answers with JSON containing the retrievable ``url``. Failures surface as
``AttachmentException`` and are never retried here.
"""

from typing import Optional

import httpx

from hostelfix.config import settings
from hostelfix.core import AttachmentException
from hostelfix.issues.application.services import Attachment, IBlobStore
from hostelfix.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class HTTPBlobStore(IBlobStore):
    """
    Blob store client over plain HTTP.

    The underlying ``httpx.AsyncClient`` is created lazily and reused;
    call ``close()`` on shutdown.
    """

    def __init__(
        self,
        upload_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._upload_url = upload_url or settings.blob_upload_url
        self._timeout = timeout_seconds or settings.blob_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport
            )
        return self._http_client

    async def upload(self, path: str, attachment: Attachment) -> str:
        """
        Upload one attachment.

        Returns:
            Retrievable URL reported by the store

        Raises:
            AttachmentException: Store not configured, unreachable, or
                answered without a URL
        """
        if not self._upload_url:
            raise AttachmentException("Blob upload URL not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                self._upload_url,
                data={"path": path},
                files={"file": (attachment.filename, attachment.content, attachment.content_type)},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise AttachmentException(
                f"Upload rejected with status {e.response.status_code}",
                {"path": path}
            )
        except httpx.HTTPError as e:
            raise AttachmentException(f"Upload failed: {str(e)}", {"path": path})
        except ValueError:
            raise AttachmentException("Upload response was not JSON", {"path": path})

        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise AttachmentException("Upload response did not include a URL", {"path": path})

        logger.info(
            "Evidence uploaded",
            extra={"path": path, "size_bytes": len(attachment.content)}
        )
        return url

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
