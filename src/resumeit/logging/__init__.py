"""Generation telemetry models and storage."""
