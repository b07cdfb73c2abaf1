"""
Pydantic schemas for requests, responses and side-effect payloads.
"""
