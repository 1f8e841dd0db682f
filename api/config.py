"""
Configuration management using Pydantic Settings.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Extraction webhook
    webhook_url: str = "https://nebukanexusai.app.n8n.cloud/webhook/extract-pdf"
    http_timeout: Optional[float] = None  # seconds; None waits indefinitely
    
    # Document
    document_title: str = "مذكرة تفاهم"
    pdf_filename: str = "مذكرة-تفاهم.pdf"
    docx_filename: str = "result.docx"
    
    # Rendering
    font_path: Optional[str] = None
    bidi_mode: str = "full"
    stray_contacts: bool = False
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = True
    
    class Config:
        env_file = "api/.env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
