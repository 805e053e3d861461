"""
SQL dump to DER converter
"""
