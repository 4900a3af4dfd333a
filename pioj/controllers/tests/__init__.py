"""Tests for :mod:`pioj.controllers`."""
