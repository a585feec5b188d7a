"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: the SQL store, the unit of work
and bearer-token lookup.
"""
