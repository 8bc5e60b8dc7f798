"""
Lifecycle read services: item states and workflow selection lists
"""
