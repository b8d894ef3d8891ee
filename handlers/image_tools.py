import base64
import mimetypes
from pathlib import Path
from typing import Any, Optional
from core.app_config import Settings
from core.logger_config import logger
from core.utils.time_utils import FileStamp
from common.errors import PredictionOutputError
from common.models import Prediction, ToolResult
from handlers.replicate_client import ReplicateClient

MISSING_PROMPT = "Missing prompt parameter."
MISSING_MODIFY_PARAMS = "Missing required parameters (prompt, image_filename)."
MISSING_INPUT_FILE = "Specified image file does not exist."
NO_OUTPUT = "No output received from the model."
UNEXPECTED_OUTPUT = "Unexpected output format"

GENERATED_MESSAGE = "Image generated successfully."
MODIFIED_MESSAGE = "Image modified successfully."


def extract_output_url(prediction: Prediction) -> str:
    '''
        Normalize prediction output to a single image URL.
        A list yields its first element; anything else must already be a string.
    '''
    output = prediction.output
    if output is None or (isinstance(output, (str, list)) and len(output) == 0):
        raise PredictionOutputError(NO_OUTPUT)

    if isinstance(output, list):
        output = output[0]

    if output is None or output == "":
        raise PredictionOutputError(NO_OUTPUT)

    if not isinstance(output, str):
        raise PredictionOutputError(UNEXPECTED_OUTPUT)

    return output


def _non_empty_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_data_uri(path: Path) -> str:
    # Replicate accepts data: URIs wherever a file input is expected
    mime_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
    encoded = base64.b64encode(path.read_bytes()).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


class ImageTools:
    '''
        Handlers for the generate_image and modify_image tools.
        Every outcome, failures included, comes back as a ToolResult.
    '''
    def __init__(self, settings: Settings, client: ReplicateClient, stamps: Optional[FileStamp] = None):
        self.settings = settings
        self.client = client
        self.stamps = stamps or FileStamp()

    async def generate_image(self, args: dict) -> ToolResult:
        prompt = _non_empty_str(args.get('prompt'))
        if prompt is None:
            return ToolResult.failure(MISSING_PROMPT)

        logger.info(f'Generating image with prompt: {prompt}')
        try:
            filename = f"generated_{self.stamps.next()}{self.settings.output_extension}"
            path = await self._run_prediction(
                self.settings.generate_model,
                {"prompt": prompt},
                self.settings.generated_dir / filename
            )
            return ToolResult.success(GENERATED_MESSAGE, str(path))
        except Exception as e:
            logger.error(f'Error generating image: {e}')
            return ToolResult.failure(str(e) or "Internal Server Error")

    async def modify_image(self, args: dict) -> ToolResult:
        prompt = _non_empty_str(args.get('prompt'))
        image_filename = _non_empty_str(args.get('image_filename'))
        if prompt is None or image_filename is None:
            return ToolResult.failure(MISSING_MODIFY_PARAMS)

        source = self._resolve_input(image_filename)
        if source is None:
            return ToolResult.failure(MISSING_INPUT_FILE)

        logger.info(f'Modifying {source.name} with prompt: {prompt}')
        try:
            filename = f"modified_{self.stamps.next()}_{source.name}"
            path = await self._run_prediction(
                self.settings.modify_model,
                {"prompt": prompt, "image": _as_data_uri(source)},
                self.settings.modified_dir / filename
            )
            return ToolResult.success(MODIFIED_MESSAGE, str(path))
        except Exception as e:
            logger.error(f'Error modifying image: {e}')
            return ToolResult.failure(str(e) or "Internal Server Error")

    def _resolve_input(self, image_filename: str) -> Optional[Path]:
        # Only plain names directly inside the input folder qualify; symlinks
        # placed there are followed
        input_dir = self.settings.input_dir.absolute()
        candidate = input_dir / image_filename
        try:
            if candidate.parent != input_dir or not candidate.is_file():
                return None
        except (OSError, ValueError):
            # NUL bytes, over-long names
            return None
        return candidate

    async def _run_prediction(self, model_path: str, payload: dict, destination: Path) -> Path:
        prediction = await self.client.create_prediction(model_path, payload)
        image_url = extract_output_url(prediction)
        logger.debug(f'Extracted image URL: {image_url}')

        await self.client.download_image(image_url, destination)
        logger.info(f'Image saved at: {destination}')
        return destination
