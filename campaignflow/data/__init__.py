"""Bundled schema and standard definition documents."""
