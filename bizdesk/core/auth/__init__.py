"""BizDesk Core Authentication Module.

Login flows live in the external auth service; this module only loads the
session user for Flask-Login and exposes its role to the API layer.
"""
