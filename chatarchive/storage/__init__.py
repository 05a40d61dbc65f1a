"""
Storage layer: store adapters and the services built on them.
"""
