"""
Infrastructure services: Senate API HTTP client, response cache, circuit
breaker and rate limiter.
"""
