"""Configuration layer: settings, discovery, overlays and logging."""
