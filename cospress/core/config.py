from functools import lru_cache
from pathlib import Path
import re

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from cospress.core.errors import ConfigurationMissing

DEFAULT_OBJECT_PREFIX = "press/"

# Bucket and region end up in the storage hostname.
_DNS_LABEL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


class Settings(BaseSettings):
    app_name: str = "cospress"
    app_env: str = "development"
    app_port: int = 10724
    log_level: str = "INFO"

    # COS upload behaviour. Credentials are NOT settings: they are re-read
    # from cos_env_path on every upload.
    cos_env_path: str = ".env"
    cos_sign_expire_seconds: int = 600
    cos_timeout_seconds: float = 30.0
    cos_image_category: str = "images"
    max_upload_bytes: int = 20 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class CosConfig(BaseModel):
    """Resolved COS configuration for a single upload invocation."""

    secret_id: str = ""
    secret_key: SecretStr = SecretStr("")
    bucket: str = ""
    region: str = ""
    prefix: str = DEFAULT_OBJECT_PREFIX
    cdn_domain: str = ""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.secret_id:
            missing.append("secret_id")
        if not self.secret_key.get_secret_value():
            missing.append("secret_key")
        if not self.bucket:
            missing.append("bucket")
        if not self.region:
            missing.append("region")
        return missing

    def invalid_fields(self) -> list[str]:
        invalid = []
        for name in ("bucket", "region"):
            value = getattr(self, name)
            if value and not _DNS_LABEL_RE.match(value):
                invalid.append(name)
        return invalid

    def is_complete(self) -> bool:
        return not self.missing_fields() and not self.invalid_fields()

    def require_complete(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise ConfigurationMissing(missing)
        invalid = self.invalid_fields()
        if invalid:
            raise ConfigurationMissing(invalid, message=f"COS is misconfigured: invalid {', '.join(invalid)}")


class CosEnvFile(BaseSettings):
    """key=value env file as written by the editor's settings dialog."""

    secret_id: str = Field(default="", validation_alias="TENCENT_SECRET_ID")
    secret_key: SecretStr = Field(default=SecretStr(""), validation_alias="TENCENT_SECRET_KEY")
    bucket: str = Field(default="", validation_alias="COS_BUCKET")
    region: str = Field(default="", validation_alias="COS_REGION")
    prefix: str = Field(default=DEFAULT_OBJECT_PREFIX, validation_alias="COS_PREFIX")
    cdn_domain: str = Field(default="", validation_alias="COS_CDN_DOMAIN")

    model_config = SettingsConfigDict(env_file_encoding="utf-8", extra="ignore", str_strip_whitespace=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Only the file counts; process env must not leak credentials in.
        return (init_settings, dotenv_settings)


def load_cos_config(env_path: str | Path) -> CosConfig:
    """Read COS configuration from an env file. Never cached."""
    path = Path(env_path).expanduser()
    if not path.is_file():
        raise ConfigurationMissing(message=f"Could not read .env file at {path}")

    env = CosEnvFile(_env_file=path)
    return CosConfig(
        secret_id=env.secret_id,
        secret_key=env.secret_key,
        bucket=env.bucket,
        region=env.region,
        prefix=env.prefix,
        cdn_domain=env.cdn_domain,
    )
