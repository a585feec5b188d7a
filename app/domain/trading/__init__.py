"""
Trading bounded context: domain layer.

This module contains all domain logic for the trading context:
- Stock catalog and portfolio entities
- Order fill rules (fees, weighted-average cost, cash reconciliation)
- Portfolio metrics (allocation, top movers, gain/loss)
"""
