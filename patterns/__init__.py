"""Reusable patterns shared by verticals.

- domain_config: frozen dataclass configuration loaded from the environment
- repository: async SQLAlchemy base repository with error mapping
"""
