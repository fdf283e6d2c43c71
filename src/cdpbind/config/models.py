"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cdpbind.toml only contains
overrides. A checkout with the protocol JSON under ``json/`` needs no
config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

# --- cdpbind.toml sections ---


class ProtocolConfig(BaseModel):
    """[protocol] section: where the two schema halves live."""

    model_config = {"frozen": True}

    browser: Path = Path("json/browser_protocol.json")
    js: Path = Path("json/js_protocol.json")


class GenerateConfig(BaseModel):
    """[generate] section."""

    model_config = {"frozen": True}

    output_dir: Path = Path("generated")
    package: str = Field(default="cdp", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    template_dir: Path | None = None


class CdpBindConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    protocol: ProtocolConfig = Field(default_factory=ProtocolConfig)
    generate: GenerateConfig = Field(default_factory=GenerateConfig)
