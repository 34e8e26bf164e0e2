"""ORM models for the GL kernel."""

from gl_kernel.models.account import Account

__all__ = ["Account"]
