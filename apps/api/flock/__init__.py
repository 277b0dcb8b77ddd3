"""Flock - people, household and profile field administration API."""
