"""
Command line interface for kvscan
"""
