"""
HTTP interfaces of the Event Gateway.
"""
