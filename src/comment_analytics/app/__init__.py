"""Application layer: configuration, dependency wiring, FastAPI app"""
