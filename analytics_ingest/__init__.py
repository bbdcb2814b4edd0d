"""
Analytics Ingestion Service

Pulls page view reports from Google Analytics into a relational store.
"""

__version__ = "1.0.0"
