"""
DockerX CMS API - Content management backend with pluggable blob storage.

This package provides:
- A public read API and an admin CRUD API over posts
- A standalone upload service backed by local, S3 or Azure storage
- A passthrough image service for stored media
"""

__version__ = "1.0.0"
__author__ = "DockerX Team"
