"""
Short-link business logic: codec, id allocation, creation and resolution.
"""
