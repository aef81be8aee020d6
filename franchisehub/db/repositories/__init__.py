"""
Functional repositories grouped by domain.

Each helper takes a ``Session`` first and returns ORM rows, ``None`` or
``False`` for missing rows.
"""
