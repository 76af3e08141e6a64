"""
Configuration management for Pagesmith
"""

import os
from typing import Optional, Dict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Supabase
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_KEY: str = os.getenv('SUPABASE_SERVICE_KEY', '')

    # Anthropic
    ANTHROPIC_API_KEY: str = os.getenv('ANTHROPIC_API_KEY', '')
    GENERATION_MAX_TOKENS: int = int(os.getenv('GENERATION_MAX_TOKENS', '8000'))

    # REST API
    PAGESMITH_API_KEY: str = os.getenv('PAGESMITH_API_KEY', '')

    # Storage buckets, one per asset kind
    DOCUMENTS_BUCKET: str = os.getenv('DOCUMENTS_BUCKET', 'content-documents')
    WIREFRAMES_BUCKET: str = os.getenv('WIREFRAMES_BUCKET', 'wireframes')
    INSPIRATIONS_BUCKET: str = os.getenv('INSPIRATIONS_BUCKET', 'design-inspirations')

    # Editor
    AUTOSAVE_DELAY_SECONDS: float = float(os.getenv('AUTOSAVE_DELAY', '3.0'))
    DEFAULT_PRIMARY_COLOR: str = os.getenv('DEFAULT_PRIMARY_COLOR', '#6366f1')

    # Publishing
    WORDPRESS_TIMEOUT: int = int(os.getenv('WORDPRESS_TIMEOUT', '30'))

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'SUPABASE_URL': cls.SUPABASE_URL,
            'SUPABASE_SERVICE_KEY': cls.SUPABASE_SERVICE_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)

    @classmethod
    def bucket_for(cls, kind: str) -> str:
        """Map an asset kind ('document', 'wireframe', 'inspiration') to its bucket."""
        buckets: Dict[str, str] = {
            'document': cls.DOCUMENTS_BUCKET,
            'wireframe': cls.WIREFRAMES_BUCKET,
            'inspiration': cls.INSPIRATIONS_BUCKET,
        }
        if kind not in buckets:
            raise ValueError(f"Unknown asset kind: {kind}")
        return buckets[kind]

    # ========================================================================
    # Model Configuration
    # ========================================================================

    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    FAST_MODEL = "claude-sonnet-4-20250514"

    @classmethod
    def get_model(cls, key: str) -> str:
        """
        Get the configured LLM model for a specific component.

        Resolution Order:
        1. Environment Variable: {KEY}_MODEL (e.g. GENERATION_MODEL)
        2. Default mapping in this method
        3. Config.DEFAULT_MODEL

        Args:
            key: component name (e.g., 'generation'), case-insensitive.

        Returns:
            Model string identifier (e.g., 'claude-sonnet-...')
        """
        key_upper = key.upper()

        env_model = os.getenv(f"{key_upper}_MODEL")
        if env_model:
            return env_model

        mappings = {
            "GENERATION": cls.DEFAULT_MODEL,
            "FAST": cls.FAST_MODEL,
        }

        return mappings.get(key_upper, cls.DEFAULT_MODEL)
