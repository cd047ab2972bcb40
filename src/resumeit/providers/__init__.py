"""Provider registry, chain building and per-provider admission state."""
