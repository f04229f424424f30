"""Configuration management for plugspace."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from plugspace.core.naming import validate_prefix

# Load .env from multiple locations
# 1. Current working directory
load_dotenv()
# 2. Project directory (where this package is installed)
_package_dir = Path(__file__).parent
load_dotenv(_package_dir.parent / ".env")
# 3. Home directory config
load_dotenv(Path.home() / ".config" / "plugspace" / ".env")


class Config(BaseSettings):
    """Configuration for plugspace."""

    # Environment Settings
    autoescape: bool = Field(default=False, description="Enable Jinja2 autoescaping")
    strict_undefined: bool = Field(default=False, description="Fail on undefined template variables")
    trim_blocks: bool = Field(default=False, description="Remove the first newline after a block tag")
    template_dir: Optional[Path] = Field(default=None, description="Directory to load templates from")

    # Plugin Settings
    plugins: dict[str, str] = Field(
        default_factory=dict,
        description="Mounted plugins as prefix -> 'package.module:ClassName'",
    )
    enabled: Optional[list[str]] = Field(
        default=None,
        description="Prefixes whose tags render enabled (default: all mounted plugins)",
    )

    # Debug Settings
    debug_log: Optional[Path] = Field(default=None, description="Debug log file path")

    model_config = {
        "env_prefix": "PLUGSPACE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("plugins")
    @classmethod
    def validate_plugin_prefixes(cls, v: dict[str, str]) -> dict[str, str]:
        """Check every mount prefix and plugin reference."""
        for prefix, reference in v.items():
            validate_prefix(prefix)
            if ":" not in reference:
                raise ValueError(f"Plugin reference must look like 'module:ClassName', got {reference!r}")
        return v

    @field_validator("enabled")
    @classmethod
    def validate_enabled_prefixes(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Check every enabled prefix."""
        if v is None:
            return v
        return [validate_prefix(prefix) for prefix in v]
