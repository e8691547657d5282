"""Tests - Test suite for the solvency circuit."""
