"""
Configuration and logging helpers for applications using ScriptAlchemy.
"""
