"""
Storage layer for the usage log.

Record model, log file access and filesystem location helpers.
"""
