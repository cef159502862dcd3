"""
UMak eBallot backend.
"""
