"""
Core infrastructure: database, cache, security, logging and metrics
"""
