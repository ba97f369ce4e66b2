"""
The link to the device.
"""
