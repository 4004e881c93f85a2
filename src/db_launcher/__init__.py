"""
DB Launcher - embedded database server launcher for test runs

Starts an embedded SQLite-backed database server (plain data protocol or
HTTP-fronted) from a small configuration record, and cleans up the
database artifact files before startup and at process exit.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
