"""Tests for RPS Duel."""
