"""
Business logic services for the Channel API
"""
