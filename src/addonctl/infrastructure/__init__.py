"""Infrastructure layer: addon source compilation and state persistence.

This layer touches the filesystem and the interpreter's module table.
It may import from the domain layer, never from services, commands, or output.
"""
