"""
core — Configuration, logging, and database wiring.
"""
