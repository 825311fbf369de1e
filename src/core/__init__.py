"""Core domain package for pumpscout.

Core contains normalization, filtering and the polling pipeline without any
HTTP or storage-specific code, keeping the business logic portable.
"""
