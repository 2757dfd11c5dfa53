"""Signing secret shared by the token fixtures."""

JWT_SECRET = "test-secret"
