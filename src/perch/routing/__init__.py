"""Routing — reference route registry for nested viewports.

Route tables are keyed by router name and matched by path prefix, so a
parent route hands the rest of the URL to its components' own tables.
"""
