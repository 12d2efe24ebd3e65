"""
Health Wallet backend.
"""
