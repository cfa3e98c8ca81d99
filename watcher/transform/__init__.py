"""
Transformation of watched contract data: converter, poller and the transformer.
"""
