"""Packaged currency table."""
