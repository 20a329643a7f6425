"""Unit tests: domain objects, pricing, registry, reservations, ticketing, storage"""
