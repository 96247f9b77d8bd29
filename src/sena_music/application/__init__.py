"""
Application Layer

Orchestrates the domain through ports:
- interfaces/: ports implemented by infrastructure adapters
- services/: fallback playback pipeline, guild queue and queue registry
"""
