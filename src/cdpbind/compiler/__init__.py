"""Compiler layer: analyses over the schema model and code rendering.

This layer depends on the schema and runtime layers plus NetworkX and Jinja2.
It must never import from services, commands, or output.
"""
