"""Application layer: use cases and the parking service facade"""
