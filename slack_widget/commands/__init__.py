"""Commands module for slack-widget CLI."""

from .init import run_init_command

__all__ = ["run_init_command"]
