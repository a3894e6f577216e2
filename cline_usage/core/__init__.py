"""
Core modules for Cline usage logging.

This package contains the usage recorder and its failure types.
"""
