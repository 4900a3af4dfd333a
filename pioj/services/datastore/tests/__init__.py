"""Tests for :mod:`pioj.services.datastore`."""
