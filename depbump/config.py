"""
Settings for depbump.

Defaults suit the public registries. Every field can be overridden through a
``DEPBUMP_<FIELD>`` environment variable.
"""

import os

from pydantic import BaseModel, Field

from .models import CENTRAL_REPO_URL


class Settings(BaseModel):
    """Network and resolution settings."""

    read_timeout: float = Field(
        default=20.0,
        gt=0,
        description="Read timeout in seconds for a single fetch attempt.",
    )
    connect_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Connect timeout in seconds for a single fetch attempt.",
    )
    retry_limit: int = Field(
        default=1,
        ge=0,
        description="Retries per fetch after a transport failure.",
    )
    max_redirects: int = Field(
        default=5,
        ge=0,
        description="Redirects followed before a fetch is abandoned.",
    )
    max_chain_depth: int = Field(
        default=25,
        ge=1,
        description="Maximum number of parent manifests walked for one lookup.",
    )
    central_repo_url: str = Field(
        default=CENTRAL_REPO_URL,
        description="Fallback Maven repository tried after all declared origins.",
    )
    package_index_url: str = Field(
        default="https://pypi.org",
        description="Python package index serving the JSON API.",
    )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from ``DEPBUMP_*`` environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = f"DEPBUMP_{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
