"""Users app package.

API client accounts and their bearer-token login, registration, logout
and refresh endpoints. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
