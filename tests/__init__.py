"""Test suite for toolrelay."""
