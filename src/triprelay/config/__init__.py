"""
Loads the relay configuration from configobj files.
"""
