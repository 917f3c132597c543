"""Domain Layer: value objects, errors, events and ports.

Has no dependencies on the core or infrastructure layers.
"""
