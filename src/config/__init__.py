"""Settings, logging and message configuration."""
