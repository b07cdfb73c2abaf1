"""
Service layer: transactions, coordination and side effects.
"""
