import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Defaults for the hosted prediction API
class ReplicateDefaults:
    BASE_URL = 'https://api.replicate.com/v1'
    GENERATE_MODEL = 'black-forest-labs/flux-schnell'
    MODIFY_MODEL = 'black-forest-labs/flux-dev'
    REQUEST_TIMEOUT_SEC = 120.0

# Local image folders, relative to the relay root
class ImageDirs:
    INPUT = 'images'
    MODIFIED = 'modified_images'
    GENERATED = 'images-from-prompt'
    OUTPUT_EXTENSION = '.webp'

DEFAULT_PORT = 4000
DEFAULT_HOST = '0.0.0.0'


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and passed to every component."""
    replicate_api_token: str = Field(repr=False, description="Bearer token for the Replicate API")
    replicate_base_url: str = Field(ReplicateDefaults.BASE_URL, description="Replicate API base URL")
    generate_model: str = Field(ReplicateDefaults.GENERATE_MODEL, description="Model path for text-to-image")
    modify_model: str = Field(ReplicateDefaults.MODIFY_MODEL, description="Model path for image-to-image")
    request_timeout: float = Field(ReplicateDefaults.REQUEST_TIMEOUT_SEC, description="Outbound request timeout in seconds")
    output_extension: str = Field(ImageDirs.OUTPUT_EXTENSION, description="Extension for generated images")
    host: str = Field(DEFAULT_HOST, description="Listening interface")
    port: int = Field(DEFAULT_PORT, description="Listening port")
    log_level: str = Field("DEBUG", description="Console log level")
    input_dir: Path = Field(description="Caller-supplied images to modify")
    modified_dir: Path = Field(description="Outputs of modify_image")
    generated_dir: Path = Field(description="Outputs of generate_image")

    @classmethod
    def for_root(cls, root: Path, **overrides) -> "Settings":
        root = Path(root).resolve()
        return cls(
            input_dir=root / ImageDirs.INPUT,
            modified_dir=root / ImageDirs.MODIFIED,
            generated_dir=root / ImageDirs.GENERATED,
            **overrides
        )

    @property
    def image_dirs(self) -> list[Path]:
        return [self.input_dir, self.modified_dir, self.generated_dir]

    def ensure_directories(self) -> None:
        for path in self.image_dirs:
            path.mkdir(parents=True, exist_ok=True)


def load_settings(root: Optional[Path] = None) -> Settings:
    '''
        Read settings from the environment (and a .env file if present).
        Raises ValueError when REPLICATE_API_TOKEN is missing.
    '''
    load_dotenv()

    token = os.getenv('REPLICATE_API_TOKEN')
    if not token:
        raise ValueError("REPLICATE_API_TOKEN environment variable is required")

    if root is None:
        root = Path(os.getenv('RELAY_ROOT', os.getcwd()))

    return Settings.for_root(
        root,
        replicate_api_token=token,
        generate_model=os.getenv('REPLICATE_MODEL', ReplicateDefaults.GENERATE_MODEL),
        modify_model=os.getenv('REPLICATE_EDIT_MODEL', ReplicateDefaults.MODIFY_MODEL),
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', ReplicateDefaults.REQUEST_TIMEOUT_SEC)),
        output_extension=os.getenv('OUTPUT_EXTENSION', ImageDirs.OUTPUT_EXTENSION),
        host=os.getenv('HOST', DEFAULT_HOST),
        port=int(os.getenv('PORT', DEFAULT_PORT)),
        log_level=os.getenv('LOG_LEVEL', 'DEBUG'),
    )
