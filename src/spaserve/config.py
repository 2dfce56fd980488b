from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "spaserve.env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    app_host: str = Field(default="127.0.0.1", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    app_env: str = Field(default="prod", alias="APP_ENV")  # dev|prod

    # Assets (SPA_PACKAGE wins over SPA_DIR when set)
    spa_dir: str = Field(default="dist", alias="SPA_DIR")
    spa_package: str | None = Field(default=None, alias="SPA_PACKAGE")
    spa_subdir: str = Field(default="dist", alias="SPA_SUBDIR")

    # Routing
    spa_base_path: str = Field(default="/", alias="SPA_BASE_PATH")
    spa_entry_file: str = Field(default="index.html", alias="SPA_ENTRY_FILE")

    @property
    def embedded(self) -> bool:
        return bool(self.spa_package and self.spa_package.strip())

    @property
    def autoreload(self) -> bool:
        return self.app_env == "dev"
