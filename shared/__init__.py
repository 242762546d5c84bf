"""
Shared Kernel

Base classes and utilities shared across the domain apps: entity and
value object bases, the time range value object and the unit of work.
"""
