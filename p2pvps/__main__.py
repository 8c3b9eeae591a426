"""
The primary entry point to the application.
"""

from p2pvps.cli import run

if __name__ == '__main__':
    run()
