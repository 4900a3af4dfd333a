"""Tests for :mod:`pioj.services`."""
