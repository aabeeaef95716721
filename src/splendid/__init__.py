"""splendid -- authenticated HTTPS relay for FRITZ!Box smart plugs.

Accepts a small JSON command over HTTPS, checks it against a static
allow-list of bearer keys, and forwards it to the home-automation
backend to switch a named actor on or off.
"""

__version__ = "0.1.0"
