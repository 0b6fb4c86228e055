"""CLI command handlers."""

from .compose import compose_fragments

__all__ = ['compose_fragments']
