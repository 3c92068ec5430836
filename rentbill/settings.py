import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RENTBILL_", extra="ignore")

    api_base_url: str = "http://localhost:3000"
    api_timeout: float = 10.0  # seconds
    api_user_agent: str = "rentbill/0.1"
    access_token: str = ""

    default_page_size: int = 20
    timezone: str = "Asia/Ho_Chi_Minh"

    log_level: str = "INFO"
    log_json: bool = False

    _warned_missing_token: bool = False

    def get_access_token(self) -> str | None:
        if not self.access_token:
            if not self._warned_missing_token:
                logger.warning(
                    "RENTBILL_ACCESS_TOKEN is not set; requests are sent without a bearer token. "
                    "Set RENTBILL_ACCESS_TOKEN in your environment or .env file."
                )
                self._warned_missing_token = True
            return None
        return self.access_token


settings = Settings()
