"""
SmartPark - allocation, reservation and billing engine for multi-floor parking facilities

Layers:
- domain: entities, pricing, exceptions
- application: space registry, reservations, ticketing, reporting, the parking service facade
- infrastructure: repositories, snapshots, messaging, factories
"""

__version__ = "1.0.0"
