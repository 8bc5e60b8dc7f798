"""
Debug data for local development builds
"""
