"""
Domain logic for the OVAL evaluation core: models and services.
"""
