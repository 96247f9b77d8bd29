"""
Shared Domain Kernel

Contains types, messages and exceptions shared across the package.
"""
