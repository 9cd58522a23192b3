"""Front-desk scheduling application.

This package holds the appointment store models, the slot scheduling
services and the API views exposed to the front-desk client.
"""
