"""
Application layer for the trading bounded context.

Use cases open a unit of work, load aggregates through ports,
apply domain rules and commit. No framework or infrastructure
imports allowed.
"""
