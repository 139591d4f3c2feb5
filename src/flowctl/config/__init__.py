"""Configuration: TOML file, environment variables, and CLI flags."""
