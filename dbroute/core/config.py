"""
Settings for dbroute, read from the environment (or a local .env file).

MYSQL_* connection fields are only used by MySQLClient.from_settings();
the connect timeout and pool knobs apply to every client in the process.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_DATABASE: str = ""

    # Driver connect timeout in seconds
    MYSQL_CONNECT_TIMEOUT: int = 10

    # Idle connections kept per ConnectionConfig, and max connection age
    MYSQL_POOL_SIZE: int = 5
    MYSQL_POOL_MAX_AGE_SEC: int = 600


settings = Settings()
