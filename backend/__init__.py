"""
HTTP API for the resume builder (FastAPI + Firebase authentication).
"""
