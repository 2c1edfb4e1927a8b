from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings with environment variable support"""

    # Application
    APP_NAME: str = "Veil Client"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")
    LOG_FILE: Optional[str] = Field(default="logs/veil_client.log", env="LOG_FILE")

    # Veil API
    VEIL_API_HOST: str = Field(default="https://api.kovan.veil.market", env="VEIL_API_HOST")
    HTTP_TIMEOUT: float = Field(default=15.0, env="HTTP_TIMEOUT")
    SESSION_REFRESH_ATTEMPTS: int = Field(default=1, ge=0, env="SESSION_REFRESH_ATTEMPTS")

    # Wallet
    VEIL_MNEMONIC: Optional[str] = Field(default=None, env="VEIL_MNEMONIC")
    VEIL_PRIVATE_KEY: Optional[str] = Field(default=None, env="VEIL_PRIVATE_KEY")
    VEIL_ADDRESS: Optional[str] = Field(default=None, env="VEIL_ADDRESS")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
