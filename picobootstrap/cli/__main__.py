"""
Entry point for running the pico-bootstrap CLI as a module.

Usage: python -m picobootstrap.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
