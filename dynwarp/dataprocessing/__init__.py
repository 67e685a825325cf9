"""
Data Processing
---------------

Tools for processing sequences, including dynamic warping.
"""
