"""Authentication and authorization.

Two authentication paths:
1. Browsers → email/password → signed session cookie (admin surface)
2. Machine clients → API token in the Authorization header (public v1 API)

Both feed the authorization gate in gate.py.
"""
