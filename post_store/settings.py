from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    debug: bool = False
    app_name: str = "post-store"
    stage: str = "dev"
    content_root_path: str = "posts"
    default_author: str = "admin"
    authors: list[str] = Field(default_factory=list)
    default_timezone: str = "UTC"
    publish_future: bool = False
    publish_protocol: str = "file"
    publish_root_path: str = "public"
    ssh_host: str | None = None
    ssh_password: str | None = None
    ssh_username: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
