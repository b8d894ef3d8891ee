import httpx
from pathlib import Path
from typing import Optional
from core.app_config import Settings
from common.errors import ImageDownloadError, ReplicateError
from common.models import Prediction
from core.logger_config import logger

FAILED_STATUSES = ('failed', 'canceled')

class ReplicateClient:
    '''
        Makes synchronous ("Prefer: wait") prediction requests to Replicate and
        downloads the resulting images. One call per tool invocation, no retries.
    '''
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        headers = {
            'Authorization': f'Bearer {settings.replicate_api_token}',
            'Content-Type': 'application/json',
            'Prefer': 'wait'
        }
        self._api = httpx.AsyncClient(
            base_url=settings.replicate_base_url,
            headers=headers,
            timeout=settings.request_timeout,
            transport=transport
        )
        # Separate client so the API token never reaches the image host
        self._downloads = httpx.AsyncClient(
            timeout=settings.request_timeout,
            follow_redirects=True,
            transport=transport
        )

    async def create_prediction(self, model_path: str, input_payload: dict) -> Prediction:
        response = await self._api.post(
            f"/models/{model_path}/predictions",
            json={"input": input_payload}
        )

        if response.is_error:
            raise ReplicateError(
                f"Replicate API request failed with status {response.status_code}: {response.text}"
            )

        prediction = Prediction.model_validate(response.json())
        logger.debug(f'Prediction {prediction.id} for {model_path}: status={prediction.status}')

        if prediction.status in FAILED_STATUSES:
            raise ReplicateError(f"Generation {prediction.status}: {prediction.error}")

        return prediction

    async def download_image(self, image_url: str, destination: Path) -> Path:
        """
        Download image from URL and save to local disk.
        Nothing is written unless the download succeeds.
        """
        try:
            response = await self._downloads.get(image_url)
        except httpx.HTTPError as e:
            raise ImageDownloadError(f"Failed to download image: {e}") from e

        if response.status_code != 200:
            raise ImageDownloadError(f"Failed to download image: {response.status_code}")

        destination.write_bytes(response.content)
        return destination

    @property
    def is_closed(self) -> bool:
        return self._api.is_closed and self._downloads.is_closed

    async def aclose(self) -> None:
        await self._api.aclose()
        await self._downloads.aclose()
