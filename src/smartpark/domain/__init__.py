"""Domain layer: entities, value objects, pricing and the exception hierarchy"""
