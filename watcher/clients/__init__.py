"""
Blockchain clients.
"""
