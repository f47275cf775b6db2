"""
Test suite for MediBook.
"""
import os

os.environ["TESTING"] = "1"
