import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"


@dataclass(frozen=True)
class Settings:
    """
    runtime knobs, read once from env / .env
    """
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = 60
    temperature: float = 0.95
    timeout: float = 20.0
    think_delay_min_ms: int = 720     # opponent "thinking" before it moves
    think_delay_spread_ms: int = 600  # random extra on top
    log_level: str = "INFO"
    theme: str = "dark"


def _env_number(name, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        log.warning("bad value for %s (%r), using %r", name, raw, default)
        return default


def load_settings(dotenv_path=None) -> Settings:
    """
    build Settings from the environment, after loading .env if present
    """
    load_dotenv(dotenv_path)
    theme = os.getenv("TRASHTALK_THEME", "dark").strip().lower()
    if theme not in ("dark", "light"):
        log.warning("unknown theme %r, using dark", theme)
        theme = "dark"
    return Settings(
        api_key=os.getenv("OPENAI_API_KEY") or None,
        api_url=os.getenv("OPENAI_API_URL", DEFAULT_API_URL),
        model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
        max_tokens=_env_number("TAUNT_MAX_TOKENS", 60, int),
        temperature=_env_number("TAUNT_TEMPERATURE", 0.95, float),
        timeout=_env_number("TAUNT_TIMEOUT", 20.0, float),
        think_delay_min_ms=max(0, _env_number("THINK_DELAY_MIN_MS", 720, int)),
        think_delay_spread_ms=max(0, _env_number("THINK_DELAY_SPREAD_MS", 600, int)),
        log_level=os.getenv("TRASHTALK_LOG_LEVEL", "INFO").upper(),
        theme=theme,
    )
