"""
Command-line interface for docsref
"""

from .main import DocsCLI, main

__all__ = ['DocsCLI', 'main']
