"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Rendering defaults and environment configuration
- logging: Structured logging configuration
"""
