from careportal.routers import admin_profile, admin_users, auth, health, households, invitations, patients

__all__ = [
    "health",
    "auth",
    "invitations",
    "households",
    "patients",
    "admin_users",
    "admin_profile",
]
