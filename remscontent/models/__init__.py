"""REMS API models."""
