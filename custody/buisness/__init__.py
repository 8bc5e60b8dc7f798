"""
Business layer for the custody service.
Holds lifecycle rules separated from data persistence concerns.
"""
