"""
Data Models
===========

Pydantic models shared by the rendering pipeline.
"""
