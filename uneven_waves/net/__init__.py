"""
Client/host transport for a match over plain TCP.
"""
