"""Trip pin points marker backend.

This package exposes the configuration, authentication, repository and
model modules used by the FastAPI application. Individual modules carry
the concrete implementations and documentation; `main.create_app` wires
them together.
"""
