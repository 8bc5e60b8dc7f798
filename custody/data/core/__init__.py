"""
Core models: users, organization reference rows, items and sequences
"""
