"""
Shared helpers: serialization, request dependencies, security, OTP and
rate limiting.
"""
