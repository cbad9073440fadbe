"""
Prometheus exposition: metric descriptors, registry collectors and HTTP server.
"""
