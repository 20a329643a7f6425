"""Infrastructure layer: storage, snapshots, messaging and object wiring"""
