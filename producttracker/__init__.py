"""
Product Tracker

Personal product records with receipts, manuals and notes, served over a
FastAPI backend.
"""

__version__ = "1.0.0"
