"""
Core utilities shared across memberhub.

This package hosts configuration, logging setup, the error hierarchy and
identifier generation. Stores and services depend on these primitives instead
of reading the environment or defining their own exceptions.
"""
