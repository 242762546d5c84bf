"""Core app package.

Cross-cutting pieces shared by the domain apps: the categorized audit
log and the API exception handler.
"""
