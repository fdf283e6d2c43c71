"""Output layer: rendering ServiceResult for humans and machines.

This layer depends on services (for the ServiceResult type) only.
It must never import from commands.
"""
