"""
Entry point for running ipdis as a module.

This allows the package to be executed with: python -m ipdis {beacon,scan}
"""

from .main import main

if __name__ == "__main__":
    exit(main())
