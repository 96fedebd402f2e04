"""
Business services.

Each service owns one session for the duration of one externally triggered
operation.
"""
