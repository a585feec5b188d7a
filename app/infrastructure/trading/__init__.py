"""
Trading bounded context: infrastructure layer.

Adapters that implement domain ports on a SQL database via SQLAlchemy.
"""
