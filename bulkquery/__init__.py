"""Bulk Query: split long texts into verifiable chunks and process them one by one."""

__version__ = "0.1.0"
