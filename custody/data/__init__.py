"""
Model packages for the custody service
"""
