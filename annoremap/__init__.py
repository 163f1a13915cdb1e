"""
remaps gene annotations from one genome assembly to another through alignment chains
"""
__version__ = '1.0.0'
