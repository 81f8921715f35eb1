"""
Core infrastructure: configuration, logging, storage, access control
"""
