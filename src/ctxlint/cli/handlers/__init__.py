"""
CLI Handlers Package.

Implementation modules for specific CLI actions.
"""
