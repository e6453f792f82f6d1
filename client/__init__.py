"""
Command line client for running jobs.
"""
