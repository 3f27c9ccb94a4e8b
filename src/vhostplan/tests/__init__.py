"""Utilities for vhostplan tests."""
