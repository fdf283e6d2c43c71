"""Configuration: TOML section models, discovery, settings, and logging setup."""
