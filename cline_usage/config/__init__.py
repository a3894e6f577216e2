"""Recorder configuration."""
