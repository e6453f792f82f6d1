"""
Job orchestration: task bookkeeping, metrics and the local job runner.
"""
