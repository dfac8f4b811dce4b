"""
Conatus backend: conditional logic and gating for personal automations.
"""
__version__ = "0.1.0"
