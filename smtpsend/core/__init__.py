"""Core message handling and delivery."""
