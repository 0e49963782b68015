"""
Core types, configuration and errors shared by the extraction pipeline.
"""
