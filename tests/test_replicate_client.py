"""
Unit tests for the Replicate upstream client.
"""

import json

import httpx
import pytest

from common.errors import ImageDownloadError, ReplicateError

from conftest import IMAGE_BYTES, IMAGE_URL


class TestCreatePrediction:
    """Test cases for ReplicateClient.create_prediction."""

    @pytest.mark.asyncio
    async def test_request_shape(self, replicate_client, fake_replicate):
        prediction = await replicate_client.create_prediction(
            "black-forest-labs/flux-schnell", {"prompt": "a red fox"}
        )

        request = fake_replicate.prediction_calls[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.replicate.com/v1/models/black-forest-labs/flux-schnell/predictions"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Prefer"] == "wait"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"input": {"prompt": "a red fox"}}

        assert prediction.id == "pred-1"
        assert prediction.output == [IMAGE_URL]

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_body(self, replicate_client, fake_replicate):
        fake_replicate.prediction_status = 401
        fake_replicate.prediction = {"detail": "Invalid token."}

        with pytest.raises(ReplicateError) as exc_info:
            await replicate_client.create_prediction("black-forest-labs/flux-schnell", {"prompt": "x"})

        assert "401" in str(exc_info.value)
        assert "Invalid token." in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_canceled_prediction_raises(self, replicate_client, fake_replicate):
        fake_replicate.prediction = {"id": "pred-1", "status": "canceled", "error": None}

        with pytest.raises(ReplicateError, match="Generation canceled"):
            await replicate_client.create_prediction("black-forest-labs/flux-schnell", {"prompt": "x"})

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, replicate_client, fake_replicate):
        fake_replicate.prediction_exception = httpx.ReadTimeout("timed out")

        with pytest.raises(httpx.ReadTimeout):
            await replicate_client.create_prediction("black-forest-labs/flux-schnell", {"prompt": "x"})

    @pytest.mark.asyncio
    async def test_extra_fields_are_kept(self, replicate_client, fake_replicate):
        fake_replicate.prediction = {"id": "pred-2", "status": "succeeded", "output": IMAGE_URL, "metrics": {"predict_time": 0.8}}

        prediction = await replicate_client.create_prediction("black-forest-labs/flux-schnell", {"prompt": "x"})

        assert prediction.output == IMAGE_URL
        assert prediction.model_extra["metrics"] == {"predict_time": 0.8}


class TestDownloadImage:
    """Test cases for ReplicateClient.download_image."""

    @pytest.mark.asyncio
    async def test_writes_file(self, replicate_client, fake_replicate, settings):
        destination = settings.generated_dir / "generated_1.webp"

        result = await replicate_client.download_image(IMAGE_URL, destination)

        assert result == destination
        assert destination.read_bytes() == IMAGE_BYTES

    @pytest.mark.asyncio
    async def test_token_not_sent_to_image_host(self, replicate_client, fake_replicate, settings):
        await replicate_client.download_image(IMAGE_URL, settings.generated_dir / "out.webp")

        request = fake_replicate.download_calls[0]
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_bad_status_writes_nothing(self, replicate_client, fake_replicate, settings):
        fake_replicate.image_status = 403
        destination = settings.generated_dir / "out.webp"

        with pytest.raises(ImageDownloadError, match="403"):
            await replicate_client.download_image(IMAGE_URL, destination)

        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_transport_error_is_download_error(self, settings):
        from handlers.replicate_client import ReplicateClient

        def refuse(request):
            raise httpx.ConnectError("no route to host")

        client = ReplicateClient(settings, transport=httpx.MockTransport(refuse))
        destination = settings.generated_dir / "out.webp"

        with pytest.raises(ImageDownloadError, match="no route to host"):
            await client.download_image(IMAGE_URL, destination)

        assert not destination.exists()
        await client.aclose()
