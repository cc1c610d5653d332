"""
Settings package. Nothing is imported here on purpose:
- backend.settings.dev   local development + tests
- backend.settings.prod  production
"""
