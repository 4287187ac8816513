"""
Note persistence: local slots, credentials, backends and the repository.
"""
