"""
Convenience entry point for running restguard directly.

Usage: python -m restguard [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
