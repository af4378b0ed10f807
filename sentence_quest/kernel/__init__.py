"""
Kernel layer: models, audit log and the persistence boundary.
"""
