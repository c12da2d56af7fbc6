"""Image upload service."""
