#!/usr/bin/env python3
"""
Convenience entry point for running freetime directly.

Usage: python freetime_bot.py [command] [options]
"""

from freetime.cli.app import app

if __name__ == "__main__":
    app()
