"""External systems (file storage)."""
