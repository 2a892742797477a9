"""
Durable image storage.

Downloads an externally generated image and uploads it to Supabase Storage
so that no persisted article references a provider's temporary URL.
"""

import logging
import random
import time
from typing import Optional

import httpx

from newsdesk.config import Settings, settings as default_settings


logger = logging.getLogger(__name__)


class ImageStorage:
    """Storage collaborator. Never raises: failures return None."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config or default_settings
        self.http_client = http_client
        self.rng = rng or random.Random()

    @property
    def is_configured(self) -> bool:
        return bool(self.config.SUPABASE_URL and self.config.SUPABASE_SERVICE_ROLE_KEY)

    def build_object_path(self, content_type: str) -> str:
        extension = content_type.split("/")[-1].split(";")[0].strip() or "jpg"
        suffix = "".join(self.rng.choice("abcdefghijklmnopqrstuvwxyz0123456789") for _ in range(5))
        return f"auto/{int(time.time() * 1000)}-{suffix}.{extension}"

    async def persist_external_image(self, temporary_url: str) -> Optional[str]:
        """
        Re-host an image.

        Args:
            temporary_url: Ephemeral URL returned by the image provider

        Returns:
            Public URL of the stored copy, or None on any failure
        """
        if not temporary_url:
            return None
        if not self.is_configured:
            logger.warning("Image storage not configured, dropping generated image")
            return None

        logger.info("Persisting image %s...", temporary_url[:50])
        base_url = self.config.SUPABASE_URL.rstrip("/")
        bucket = self.config.STORAGE_BUCKET

        client = self.http_client or httpx.AsyncClient()
        try:
            download = await client.get(temporary_url, timeout=self.config.STORAGE_TIMEOUT)
            download.raise_for_status()
            content_type = download.headers.get("content-type", "image/jpeg")
            object_path = self.build_object_path(content_type)

            upload = await client.post(
                f"{base_url}/storage/v1/object/{bucket}/{object_path}",
                content=download.content,
                headers={
                    "Authorization": f"Bearer {self.config.SUPABASE_SERVICE_ROLE_KEY}",
                    "Content-Type": content_type,
                    "x-upsert": "true",
                },
                timeout=self.config.STORAGE_TIMEOUT,
            )
            upload.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Failed to persist image: %s", e)
            return None
        finally:
            if self.http_client is None:
                await client.aclose()

        public_url = f"{base_url}/storage/v1/object/public/{bucket}/{object_path}"
        logger.info("Persisted image at %s", public_url)
        return public_url
