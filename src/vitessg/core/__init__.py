"""Core static bundle pipeline."""
