#!/usr/bin/env python3
"""
imagemage - Main Entry Point

Run with: python -m imagemage <command> [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
