"""Database Conventions — declarative Base and async session factory.

Invariants:
    - Primary and foreign keys default to UUID ("binary id")
"""
