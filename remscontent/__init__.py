"""Declarative management of REMS content."""

__title__ = "remscontent"
__version__ = VERSION = "0.1.0"
__author__ = "UMCCR Developers"
