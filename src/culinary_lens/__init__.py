"""Menu-to-photography generation service."""
