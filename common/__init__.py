"""
Shared building blocks for the market capitalization MapReduce job:
records, configuration, counters, currency formatting and errors.
"""
