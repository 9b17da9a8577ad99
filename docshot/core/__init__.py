"""
Core Business Logic
==================

Core business logic modules for document rendering.

Modules:
- rendering: backend probing, viewport resolution, section capture and artifact naming
"""
