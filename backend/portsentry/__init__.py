"""
Port Sentry backend.

Local port inventory with process/service identification, firewall block status
and privilege-gated corrective actions.
"""

__version__ = "1.0.0"
