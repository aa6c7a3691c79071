"""
Test suite for the Avellaneda-Stoikov market making core.
"""
