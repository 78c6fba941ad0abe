"""
Scan specification, filtering and execution
"""
