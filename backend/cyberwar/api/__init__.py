"""
API Module

FastAPI collaborator layer over game sessions.
"""
