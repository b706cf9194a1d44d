"""arch-preflight: design-time validation for visual backend architectures."""

__version__ = "0.1.0"
