"""
MapReduce job modules.
"""
