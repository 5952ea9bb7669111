"""Components for emulating an 8-bit handheld game console: configuration
variables, sound, real-time clock, save states, link cable, display layout
and input mapping."""

__version__ = "0.1.0"