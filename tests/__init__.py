"""Test suite for the Firebase messaging backend."""
