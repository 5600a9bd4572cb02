"""
Entry point for running pico-bootstrap as a module.

Usage: python -m picobootstrap [command] [options]
"""

from picobootstrap.cli.parser import main

if __name__ == "__main__":
    main()
