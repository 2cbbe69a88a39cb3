"""API Resilience Implementations.

Contains the sliding window rate limiter and the 429 retry loop that guard
every call to the remote API.
Bounded Context: API Resilience
"""
