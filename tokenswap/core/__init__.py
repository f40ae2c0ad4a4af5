"""
Pure pool math: checked arithmetic, fees, creation constraints and the
constant-product swap / deposit / withdraw quotes.
"""
