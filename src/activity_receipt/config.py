"""
Activity Receipt Configuration
==============================

This module handles configuration loading for the print server.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    PORT                   -> server.port
    RECEIPT_SERVER_PORT    -> server.port
    RECEIPT_SLOW_PRINT     -> printer.pacing
    RECEIPT_PRINTER_NAMES  -> printer.candidates (comma separated)
    RECEIPT_DRY_RUN        -> printer.dry_run
    RECEIPT_LOGO_PATH      -> receipt.logo.path
    RECEIPT_LOG_LEVEL      -> logging.level

Example:
    from activity_receipt.config import settings

    print(settings.server.port)
    print(settings.printer.pacing)
    print(settings.receipt.line_width)
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=3001, ge=1, le=65535, description="Bind port")


class PrinterConfig(BaseModel):
    """Printer discovery and spooling configuration."""

    candidates: List[str] = Field(
        default_factory=lambda: [
            "EPSON_TM_T20III",
            "Epson_TM_T20III",
            "TM-T20III",
            "TM-T20",
            "Epson",
        ],
        description="Printer names probed in order against the OS print queue",
    )
    pacing: str = Field(
        default="slow",
        description="Slow-print mode: 'off', 'fast', 'medium' or 'slow'",
    )
    spool_dir: Optional[str] = Field(
        default=None,
        description="Directory for temporary spool files (None = system temp)",
    )
    lp_command: str = Field(default="lp", description="Print submission command")
    lpstat_command: str = Field(default="lpstat", description="Printer probe command")
    section_cleanup_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Grace delay before deleting a section spool file",
    )
    job_cleanup_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Grace delay before deleting a single-shot spool file",
    )
    encoding: str = Field(
        default="cp437",
        description="Printer code page used to encode receipt text",
    )
    dry_run: bool = Field(
        default=False,
        description="Log the receipt instead of sending it to a printer",
    )

    @field_validator("pacing")
    @classmethod
    def validate_pacing(cls, v: str) -> str:
        """Ensure pacing names one of the known slow-print modes."""
        v = v.strip().lower()
        if v not in ("off", "fast", "medium", "slow"):
            raise ValueError(f"Unknown slow-print mode: {v}")
        return v


class LogoConfig(BaseModel):
    """Header logo configuration."""

    enabled: bool = Field(default=True, description="Print the header logo")
    path: str = Field(default="assets/logo.png", description="Logo image path")
    max_width: int = Field(default=512, ge=8, description="Maximum logo width (dots)")
    contrast: float = Field(default=0.3, gt=-1.0, lt=1.0, description="Contrast boost")


class ImageConfig(BaseModel):
    """Route and photo image configuration."""

    route_max_width: int = Field(default=512, ge=8, description="Maximum route width (dots)")
    route_canvas_width: int = Field(default=400, ge=8, description="Route canvas width")
    route_canvas_height: int = Field(default=300, ge=8, description="Route canvas height")
    route_stroke_width: int = Field(default=2, ge=1, description="Route stroke width")
    route_contrast: float = Field(default=0.3, gt=-1.0, lt=1.0, description="Route contrast")
    photo_max_width: int = Field(default=400, ge=8, description="Maximum photo width (dots)")
    photo_contrast: float = Field(default=0.2, gt=-1.0, lt=1.0, description="Photo contrast")
    max_photos: int = Field(default=3, ge=0, description="Photos printed per receipt")
    threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Ink threshold on inverted luminance",
    )


class QRConfig(BaseModel):
    """QR code configuration."""

    enabled: bool = Field(default=True, description="Print the activity QR code")
    module_size: int = Field(default=5, ge=1, le=16, description="QR module size")
    ec_level: str = Field(default="M", description="Error correction: L, M, Q or H")

    @field_validator("ec_level")
    @classmethod
    def validate_ec_level(cls, v: str) -> str:
        """Ensure the error correction level is one of L, M, Q, H."""
        v = v.strip().upper()
        if v not in ("L", "M", "Q", "H"):
            raise ValueError(f"Unknown QR error correction level: {v}")
        return v


class ReceiptConfig(BaseModel):
    """Receipt layout configuration."""

    brand: str = Field(default="STRAVA", description="Brand printed on the receipt")
    activity_url_template: str = Field(
        default="https://www.strava.com/activities/{id}",
        description="URL encoded in the QR code",
    )
    line_width: int = Field(default=48, ge=16, description="Characters per line")
    default_location: str = Field(
        default="NEW YORK, NEW YORK",
        description="Location printed when the activity has none",
    )
    route_title: str = Field(default="RUN ROUTE", description="Route section title")
    gratuity_lines: List[str] = Field(
        default_factory=lambda: [
            "[ ] GIVE SOME KUDOS",
            "[ ] SHARE WITH A FRIEND",
            "[ ] FOLLOW & TAG @_RE_PETE",
        ],
        description="Checkbox lines under SUGGESTED GRATUITY",
    )
    footer: str = Field(default="<< ATHLETE COPY >>", description="Footer line")
    logo: LogoConfig = Field(default_factory=LogoConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)
    qr: QRConfig = Field(default_factory=QRConfig)


class FetchConfig(BaseModel):
    """Photo download configuration."""

    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Bounded wait for a photo download or image render",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the print server.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    printer: PrinterConfig = Field(default_factory=PrinterConfig)
    receipt: ReceiptConfig = Field(default_factory=ReceiptConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server settings
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("RECEIPT_SERVER_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Printer settings
    if env_pacing := os.environ.get("RECEIPT_SLOW_PRINT"):
        config_data.setdefault("printer", {})["pacing"] = env_pacing
    if env_names := os.environ.get("RECEIPT_PRINTER_NAMES"):
        names = [n.strip() for n in env_names.split(",") if n.strip()]
        config_data.setdefault("printer", {})["candidates"] = names
    if env_dry := os.environ.get("RECEIPT_DRY_RUN"):
        config_data.setdefault("printer", {})["dry_run"] = env_dry.lower() in ("1", "true", "yes")

    # Receipt settings
    if env_logo := os.environ.get("RECEIPT_LOGO_PATH"):
        config_data.setdefault("receipt", {}).setdefault("logo", {})["path"] = env_logo

    # Logging settings
    if env_log := os.environ.get("RECEIPT_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
