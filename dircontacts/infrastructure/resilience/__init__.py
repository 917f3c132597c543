"""API Resilience Implementations.

Contains the quota retry policy and the limiter that bounds how many
batch calls are in flight.
Bounded Context: API Resilience
"""
