"""Declarative runner applying a configuration file to REMS."""
