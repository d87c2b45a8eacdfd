import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"
DEFAULT_VOICE = "Puck"
DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a live AI Screen Reader and Interaction Agent. You have a constant video feed of the "
    "user screen capture. Your PRIMARY function is to look at this visual feed and answer questions "
    "about it. YOU CAN SEE THE SCREEN. If you see text, UI elements, or images, describe them if "
    'asked. Use the "click_answer" tool to highlight elements on the screen. If the screen appears '
    "static, continue watching for changes. Always assume you can see the screen unless it is "
    "literally black."
)


class OmniVisionConfig(BaseModel):
    api_key: str = Field(default="", description="Gemini API key; the session refuses to start without it")
    model: str = Field(default=DEFAULT_MODEL, description="Gemini Live model")
    voice: str = Field(default=DEFAULT_VOICE, description="Prebuilt voice for the agent")
    system_instruction: str = Field(default=DEFAULT_SYSTEM_INSTRUCTION, description="System prompt for the agent")
    input_device: Optional[int] = Field(default=None, description="sounddevice input device index")
    output_device: Optional[int] = Field(default=None, description="sounddevice output device index")
    monitor: int = Field(default=1, ge=0, description="mss monitor index to share (0 = all monitors)")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key.strip())


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


def load_config(config_path: Optional[Path] = None) -> OmniVisionConfig:
    if config_path is None:
        config_path = Path(".env")

    if config_path.exists():
        load_dotenv(config_path)
        logger.info(f"Loaded environment variables from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using environment variables only")

    try:
        config = OmniVisionConfig(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            voice=os.getenv("GEMINI_VOICE", DEFAULT_VOICE),
            system_instruction=os.getenv("SYSTEM_INSTRUCTION", DEFAULT_SYSTEM_INSTRUCTION),
            input_device=_optional_int(os.getenv("INPUT_DEVICE")),
            output_device=_optional_int(os.getenv("OUTPUT_DEVICE")),
            monitor=int(os.getenv("SCREEN_MONITOR", "1")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

    # A missing key is reported when a session is started, not here.
    if not config.has_credentials:
        logger.warning("GEMINI_API_KEY is not set. Sessions cannot start until it is configured.")

    return config


def create_example_env_file(path: Path = Path(".env.example")):
    example_content = f"""# Gemini API key - Get from https://aistudio.google.com/
GEMINI_API_KEY=your_api_key_here

# Live model and voice
GEMINI_MODEL={DEFAULT_MODEL}
GEMINI_VOICE={DEFAULT_VOICE}

# Audio devices (sounddevice indices, leave empty for system default)
INPUT_DEVICE=
OUTPUT_DEVICE=

# Monitor to share (1 = primary, 0 = all monitors combined)
SCREEN_MONITOR=1

# Logging level
LOG_LEVEL=INFO
"""

    with open(path, "w") as f:
        f.write(example_content)

    logger.info(f"Created example environment file at {path}")


def setup_logging(log_level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
