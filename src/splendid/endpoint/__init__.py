"""HTTPS command endpoint.

Receives JSON switch commands on ``/gghr/``, validates them against the
authorized keys and relays them to the home-automation backend.
"""
