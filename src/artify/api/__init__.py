"""AI Artify — FastAPI REST API layer.

This package contains the FastAPI application and the Pydantic
request/response models.

Modules
-------
main
    FastAPI application with the route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response bodies.
"""
