"""
Engines: domain logic layered over the kernel models.
"""
