"""
DevNote Backend - API Schemas
=============================

Pydantic models for request bodies and response payloads. They are kept
apart from the ORM models so that internal columns (password hashes, raw
flags on other users' profiles) never leak into responses by accident.
"""
