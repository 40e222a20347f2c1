"""
Atlas Library API

FastAPI application exposing the library over HTTP.
"""
