"""
Event log command line interface.
"""
