from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str
    DB_ECHO: bool = False

    # Security
    SECRET_KEY: str = "something"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Real-time channel
    WS_PING_INTERVAL_SECONDS: int = 30
    WS_AUTH_TIMEOUT_SECONDS: float = 10.0
    WS_POLICY_CLOSE_CODE: int = 1008
    NOTIFICATION_TOAST_DURATION_MS: int = 6000

    AUTO_CREATE_TABLES: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
