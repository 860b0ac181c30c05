"""
patch-sync - Replay commits between a private monorepo and its public mirror.

This package imports pull requests opened against a public mirror back into
the private monorepo, and exports monorepo commits to the mirror, replaying
each commit as a filtered patch on a linear history.
"""

__version__ = "1.0.0"
