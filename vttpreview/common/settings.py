# vttpreview/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class Settings(BaseSettings):
    # -------- App --------
    app_name: str = "vttpreview"
    log_level: str = "INFO"

    # -------- Sampling / sprite --------
    thumb_rate_seconds: float = Field(1.0, gt=0, allow_inf_nan=False, description="Seconds between sampled thumbnails")
    thumb_width: int = Field(120, ge=1, le=4096, description="Target width of each thumbnail (px)")

    # -------- Output layout --------
    sprite_file_name: str = "sprite.jpg"
    vtt_file_name: str = "thumbs.vtt"
    previews_subdir: str = "previews"
    thumbs_subdir: str = "thumbs"

    # -------- External tools --------
    ffmpeg_bin: str = Field(default="ffmpeg", validation_alias=AliasChoices("FFMPEG_BIN", "ffmpeg_bin"))
    mogrify_bin: str = Field(default="mogrify", validation_alias=AliasChoices("MOGRIFY_BIN", "mogrify_bin"))
    montage_bin: str = Field(default="montage", validation_alias=AliasChoices("MONTAGE_BIN", "montage_bin"))
    auto_install_tools: bool = False  # uses the host package manager (sudo apt-get / brew / choco)

    # -------- Behavior --------
    cleanup_thumbnails: bool = True
    max_preview_workers: int = Field(4, ge=1, le=64, description="Upper bound for concurrent preview jobs")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("auto_install_tools", "cleanup_thumbnails", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from vttpreview.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()
