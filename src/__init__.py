"""
Static site deployment and domain management
"""
