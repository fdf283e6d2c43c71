"""Service layer: operations returning ServiceResult.

Services may import from schema, compiler, runtime, and config layers.
They must never import from commands or output.
"""
