"""Chores bundled with chored.

:mod:`chored.chores.builtins` is searched after the task root, so the
chores it exports are available in every project.
"""
