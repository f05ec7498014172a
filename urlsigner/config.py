import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from urlsigner.clock import Clock, system_clock
from urlsigner.signer import UrlSigner
from urlsigner.signing import get_algorithm

logger = logging.getLogger(__name__)

DEFAULT_SIGNATURE_KEY = "change-me-in-production"


class Settings(BaseSettings):
    app_name: str = "url-signer"
    app_env: str = "dev"
    log_level: str = "INFO"

    signature_key: str = DEFAULT_SIGNATURE_KEY
    expires_parameter: str = "expires"
    signature_parameter: str = "signature"
    algorithm: str = "hmac-sha256"

    min_ttl_seconds: int = 30
    max_ttl_seconds: int = 86400

    model_config = SettingsConfigDict(env_file=".env", env_prefix="URLSIGNER_")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_signer(settings: Settings, clock: Clock = system_clock) -> UrlSigner:
    if settings.signature_key == DEFAULT_SIGNATURE_KEY:
        logger.warning("URLSIGNER_SIGNATURE_KEY is not set; signed URLs use the public default key")

    return UrlSigner(
        settings.signature_key,
        settings.expires_parameter,
        settings.signature_parameter,
        algorithm=get_algorithm(settings.algorithm),
        clock=clock,
    )
