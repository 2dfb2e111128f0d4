"""Domain layer: repository interfaces."""
