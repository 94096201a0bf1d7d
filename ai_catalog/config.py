"""
Runtime configuration for the AI Catalog Bot.

Every integration is gated by one secret. A missing secret disables that
integration instead of stopping the process.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_GEMINI_MODEL = 'gemini-2.0-flash'
DEFAULT_DATA_PATH = 'ai-data.json'


@dataclass(frozen=True)
class Settings:
    """Configuration container for the chat, analysis and catalog integrations."""
    telegram_bot_token: str
    gemini_api_key: str
    gemini_model: str
    gemini_temperature: float
    analysis_timeout: float
    github_token: str
    github_owner: str
    github_repo: str
    github_data_path: str
    github_branch: Optional[str]
    request_timeout: float
    port: int

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token)

    @property
    def analysis_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def catalog_enabled(self) -> bool:
        return bool(self.github_token and self.github_owner and self.github_repo)


def load_settings() -> Settings:
    """
    Load settings from environment variables and defaults.

    Raises:
        ValueError: if a numeric variable cannot be parsed
    """
    return Settings(
        telegram_bot_token=os.getenv('TELEGRAM_BOT_TOKEN', ''),
        gemini_api_key=os.getenv('GEMINI_API_KEY', ''),
        gemini_model=os.getenv('GEMINI_MODEL') or DEFAULT_GEMINI_MODEL,
        gemini_temperature=float(os.getenv('GEMINI_TEMPERATURE', '0.1')),
        analysis_timeout=float(os.getenv('ANALYSIS_TIMEOUT', '60')),
        github_token=os.getenv('GITHUB_TOKEN') or os.getenv('GITHUB_PAT', ''),
        github_owner=os.getenv('GITHUB_OWNER', ''),
        github_repo=os.getenv('GITHUB_REPO', ''),
        github_data_path=os.getenv('GITHUB_DATA_PATH') or DEFAULT_DATA_PATH,
        github_branch=os.getenv('GITHUB_BRANCH') or None,
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', '10')),
        port=int(os.getenv('PORT', '3000')),
    )
