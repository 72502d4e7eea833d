"""
Core business logic for video sharing.

This module is framework-agnostic - it doesn't import FastAPI, pymongo,
or any infrastructure concerns. The publish flow talks to the outside
world only through the protocols it declares.
"""
