"""Command-line interface for the archive analyzer."""

from .presenter import CLIPresenter

__all__ = ['CLIPresenter']
