"""
CSV I/O at the file boundary.

Handles reading delimited files into string rows and writing converted rows
back to disk.
"""
