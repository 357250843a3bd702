"""Command-line interface for hfsupload."""
