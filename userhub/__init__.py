"""userhub: user registration, login and admin user management behind JWT auth."""

__version__ = "0.1.0"
