"""
Contract ABI resolution and watch descriptors.
"""
