"""Evaluator helper modules for the kappa reference interpreter."""

__all__ = [
    "bind",
    "control",
    "expr",
    "pairs",
    "subst",
]
