"""
Read services (queries only) for the custody service
"""
