#!/usr/bin/env python3
"""
dupscope Entry Point

This script provides a convenient entry point for running dupscope
without requiring package installation.

Usage:
    python3 dupscope.py [options] PATH [PATH ...]

This is equivalent to:
    python3 -m dupscope.cli.main [options] PATH [PATH ...]
"""

import sys
import os

# Add the current directory to Python path so we can import dupscope
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    from dupscope.cli.main import main
    main()
