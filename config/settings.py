#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Directories ==========
    uploads_dir: Path = BASE_DIR / "uploads"
    pdf_output_dir: Path = BASE_DIR / "uploads" / "pdfs"
    logs_dir: Path = BASE_DIR / "data" / "logs"

    # Public path prefix returned to callers for generated files
    pdf_public_prefix: str = "/uploads/pdfs"

    # ========== Image Pipeline ==========
    image_fetch_timeout_sec: float = 10.0
    image_quality: int = 95  # load_normalized default
    background_image_quality: int = 90  # full-page backgrounds, keep >= 90
    placeholder_image_quality: int = 80

    # ========== Fonts ==========
    # Extra font files (comma-separated), probed before the platform defaults
    font_paths: str = ""

    # ========== Catalog Document ==========
    catalog_language: str = "en"  # en | zh
    default_company_name: Optional[str] = None  # None = localized "Company"
    # ReportLab invariant mode: identical input -> identical bytes
    pdf_invariant: bool = False

    # ========== Data Source ==========
    catalog_db_path: Path = BASE_DIR / "data" / "catalog.db"

    # ========== Logging ==========
    log_level: str = "INFO"
    log_to_file: bool = False

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def get_font_paths(self) -> List[Path]:
        """Get extra font candidates as a list of paths."""
        return [Path(p.strip()) for p in self.font_paths.split(",") if p.strip()]


settings = Settings()
