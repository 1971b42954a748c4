import os
import json
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}

if log_level not in VALID_LOG_LEVELS:
    print(f"Invalid LOG_LEVEL: {log_level}. Defaulting to INFO")
    log_level = "INFO"

logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logging.getLogger("PIL").setLevel(logging.INFO)
logging.getLogger("pdf2image").setLevel(logging.WARNING)

# Defaults
RENDER_SCALE = 1.5
JPEG_QUALITY = 0.8
MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB
OUTPUT_SUFFIX = "_first_last_pages.pdf"
PDF_MIME_TYPE = "application/pdf"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "FIRSTLAST_RENDER_SCALE": "render_scale",
    "FIRSTLAST_JPEG_QUALITY": "jpeg_quality",
    "FIRSTLAST_DISPLAY_DIVISOR": "display_divisor",
    "FIRSTLAST_MAX_FILE_SIZE": "max_file_size",
    "POPPLER_PATH": "poppler_path",
}


class ExtractionSettings(BaseModel):
    """Tunables for page extraction.

    display_divisor converts raster pixels into output page points. When it
    is left unset the render scale is used, so output pages keep the size of
    the source pages.
    """
    render_scale: float = Field(default=RENDER_SCALE, gt=0)
    jpeg_quality: float = Field(default=JPEG_QUALITY, gt=0, le=1)
    display_divisor: Optional[float] = Field(default=None, gt=0)
    max_file_size: int = Field(default=MAX_FILE_SIZE, gt=0)
    poppler_path: Optional[str] = None


# Configuration handling
def get_config_dir():
    """Get the configuration directory for firstlast."""
    if os.name == 'nt':  # Windows
        config_dir = Path(os.environ.get('APPDATA', '~')) / 'firstlast'
    else:  # Unix-like
        config_dir = Path('~/.config/firstlast').expanduser()
    return config_dir

def get_config_file():
    """Get the configuration file path."""
    return get_config_dir() / 'config.json'

def load_config():
    """Load configuration from various sources."""
    config = {}

    # Try loading from config file
    config_file = get_config_file()
    if config_file.exists():
        try:
            with open(config_file) as f:
                config = json.load(f)
        except Exception as e:
            logging.warning(f"Error loading config file: {e}")

    # Environment variables take precedence
    for env_name, key in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.getenv(env_name)

    return config

def save_config(config):
    """Save configuration to file."""
    config_dir = get_config_dir()
    config_file = get_config_file()

    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w') as f:
            json.dump(config, f, indent=2)
    except Exception as e:
        logging.error(f"Error saving config file: {e}")
        raise

def load_settings(**overrides) -> ExtractionSettings:
    """Build settings from config file, environment and explicit overrides.

    Overrides whose value is None are ignored, so argparse results can be
    passed straight through.
    """
    config = {key: value for key, value in load_config().items() if key in ExtractionSettings.model_fields}
    config.update({key: value for key, value in overrides.items() if value is not None})
    return ExtractionSettings(**config)
