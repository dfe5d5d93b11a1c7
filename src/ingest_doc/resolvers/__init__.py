from .dotted import DottedPathResolver, append_values, extend_values

__all__ = ["DottedPathResolver", "append_values", "extend_values"]
