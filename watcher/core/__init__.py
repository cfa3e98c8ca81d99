"""
Core services: logging and configuration.
"""
