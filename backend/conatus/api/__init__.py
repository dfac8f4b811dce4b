"""
HTTP routers for the Conatus backend.
"""
