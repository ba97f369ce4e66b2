"""
The line protocol spoken by the device.

Frames travel from the device as newline terminated text of the form
``<humidity,temperature,cpm,heading,...>``. Commands travel to the device as
single characters.
"""
