"""REMS content provider, its resources, data sources and functions."""

from .provider import RemsContentProvider

__all__ = ["RemsContentProvider"]
